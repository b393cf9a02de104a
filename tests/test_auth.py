import pytest
from werkzeug.security import check_password_hash

from smart_city.auth import login, signup
from smart_city.errors import AuthenticationError, ValidationError

FORM = {
    'name': 'Asha', 'surname': 'Rao', 'gender': 'female', 'state': 'Karnataka', 'city': 'Bengaluru',
    'address': 'MG Road', 'employeeId': 'EMP-9', 'mobile': '9876543210', 'email': 'Asha@Example.com',
    'password': 'pass123', 'confirmPassword': 'pass123',
}


def test_signup_creates_citizen_with_zero_points(users):
    user = signup(users, 'citizen', FORM)

    assert user.points == 0
    assert user.address == 'MG Road'
    assert user.employee_id is None
    assert user.password_hash == 'pass123'
    assert users.get(user.id) == user


def test_signup_admin_keeps_employee_id(users):
    user = signup(users, 'admin', FORM)
    assert user.employee_id == 'EMP-9'
    assert user.address is None


def test_signup_password_mismatch_writes_nothing(users):
    with pytest.raises(ValidationError, match='Passwords do not match'):
        signup(users, 'citizen', dict(FORM, confirmPassword='other'))
    assert users.all() == []


def test_signup_duplicate_email_ignores_case_by_default(users):
    signup(users, 'citizen', FORM)
    with pytest.raises(ValidationError, match='already exists'):
        signup(users, 'citizen', dict(FORM, email='asha@example.com'))
    assert len(users.all()) == 1


def test_signup_duplicate_email_case_sensitive(users):
    signup(users, 'citizen', FORM)
    signup(users, 'citizen', dict(FORM, email='asha@example.com'), email_case_sensitive=True)
    with pytest.raises(ValidationError):
        signup(users, 'citizen', FORM, email_case_sensitive=True)
    assert len(users.all()) == 2


def test_signup_rejects_unlisted_city(users):
    with pytest.raises(ValidationError):
        signup(users, 'citizen', dict(FORM, city='Chennai'))


def test_signup_hashes_outside_demo_mode(users):
    user = signup(users, 'citizen', FORM, insecure_demo_mode=False)
    assert user.password_hash != 'pass123'
    assert check_password_hash(user.password_hash, 'pass123')
    assert login(users, 'citizen', 'Asha@Example.com', 'pass123', insecure_demo_mode=False) == user


def test_login_matches_email_password_and_role(users):
    user = signup(users, 'citizen', FORM)
    assert login(users, 'citizen', 'Asha@Example.com', 'pass123') == user
    with pytest.raises(AuthenticationError):
        login(users, 'admin', 'Asha@Example.com', 'pass123')
    with pytest.raises(AuthenticationError):
        login(users, 'citizen', 'Asha@Example.com', 'wrong')
    with pytest.raises(AuthenticationError):
        login(users, 'citizen', 'asha@example.com', 'pass123')


def test_demo_accounts(users):
    admin = login(users, 'admin', 'admin@ghmc.gov.in', 'admin123')
    citizen = login(users, 'citizen', 'citizen@gmail.com', 'citizen123')

    assert admin.id == 'demo-admin' and admin.role == 'admin'
    assert citizen.id == 'demo-citizen' and citizen.points == 0
    assert {u.id for u in users.all()} == {'demo-admin', 'demo-citizen'}
    # a second login reuses the roster record
    login(users, 'citizen', 'citizen@gmail.com', 'citizen123')
    assert len(users.all()) == 2


def test_demo_pair_is_role_specific(users):
    with pytest.raises(AuthenticationError, match='Officer @ghmc.gov.in'):
        login(users, 'admin', 'citizen@gmail.com', 'citizen123')


def test_demo_accounts_disabled_outside_demo_mode(users):
    with pytest.raises(AuthenticationError):
        login(users, 'admin', 'admin@ghmc.gov.in', 'admin123', insecure_demo_mode=False)
    assert users.all() == []


def test_unknown_role(users):
    with pytest.raises(ValidationError):
        login(users, 'superuser', 'x', 'y')
