"""
Login and signup against the user roster.

With ``insecure_demo_mode`` on, credentials are stored and compared as plain
text and the two built-in demo accounts are accepted. With it off, passwords
go through Werkzeug's salted hashes and the demo accounts are disabled.
"""

import logging

from werkzeug.security import check_password_hash, generate_password_hash

from .dispatch import new_id
from .errors import AuthenticationError, ValidationError
from .models import ROLES, User, is_known_city

logger = logging.getLogger(__name__)

DEMO_ACCOUNTS = {
    'admin': {
        'id': 'demo-admin',
        'name': 'Demo',
        'surname': 'Officer',
        'state': 'Telangana',
        'city': 'Hyderabad',
        'employeeId': 'GHMC-0001',
        'mobile': '',
        'email': 'admin@ghmc.gov.in',
        'passwordHash': 'admin123',
        'role': 'admin',
        'points': 0,
    },
    'citizen': {
        'id': 'demo-citizen',
        'name': 'Demo',
        'surname': 'Citizen',
        'state': 'Telangana',
        'city': 'Hyderabad',
        'address': '',
        'mobile': '',
        'email': 'citizen@gmail.com',
        'passwordHash': 'citizen123',
        'role': 'citizen',
        'points': 0,
    },
}


def _check_role(role):
    if role not in ROLES:
        raise ValidationError(f"Unknown role: {role}")


def hash_credential(password, insecure_demo_mode):
    if insecure_demo_mode:
        return password
    return generate_password_hash(password)


def credential_matches(user, password, insecure_demo_mode):
    if insecure_demo_mode:
        return user.password_hash == password
    return check_password_hash(user.password_hash, password)


def _demo_login(users, role, email, password):
    account = DEMO_ACCOUNTS[role]
    if email != account['email'] or password != account['passwordHash']:
        return None
    user = users.get(account['id'])
    if user is None:
        # kept in the roster so resolved complaints can credit the demo citizen
        user = users.add(User.from_dict(account))
    return user


def login(users, role, email, password, insecure_demo_mode=True):
    _check_role(role)
    for user in users.all():
        if user.email == email and user.role == role and credential_matches(user, password, insecure_demo_mode):
            logger.info("User %s signed in as %s", user.id, role)
            return user

    if insecure_demo_mode:
        user = _demo_login(users, role, email, password)
        if user is not None:
            logger.info("Demo %s account signed in", role)
            return user

    logger.info("Failed %s sign-in for %s", role, email)
    hint = 'Officer @ghmc.gov.in email' if role == 'admin' else 'registered email'
    raise AuthenticationError(f"Invalid access credentials. Ensure your {hint} is correct.")


def signup(users, role, form, insecure_demo_mode=True, email_case_sensitive=False):
    """Validate the signup form and add the new user to the roster. Nothing is written on failure."""
    _check_role(role)
    required = ('name', 'email', 'password', 'state', 'city')
    missing = [field for field in required if not form.get(field)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    if form.get('password') != form.get('confirmPassword'):
        raise ValidationError("Passwords do not match.")
    if not is_known_city(form['state'], form['city']):
        raise ValidationError(f"{form['city']} is not a listed city of {form['state']}.")
    if users.find_by_email(form['email'], case_sensitive=email_case_sensitive) is not None:
        raise ValidationError("An account with this email already exists.")

    user = User(
        id=new_id(),
        name=form['name'],
        surname=form.get('surname', ''),
        gender=form.get('gender', ''),
        state=form['state'],
        city=form['city'],
        address=form.get('address', '') if role == 'citizen' else None,
        employee_id=form.get('employeeId', '') if role == 'admin' else None,
        mobile=form.get('mobile', ''),
        email=form['email'],
        password_hash=hash_credential(form['password'], insecure_demo_mode),
        role=role,
        points=0,
    )
    users.add(user)
    logger.info("Registered %s %s", role, user.id)
    return user
