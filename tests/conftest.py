import os

os.environ.setdefault('SMART_CITY_DATABASE_URI', 'sqlite://')
os.environ.setdefault('INSECURE_DEMO_MODE', 'true')

import pytest

from smart_city.dispatch import Dispatcher
from smart_city.models import Location, User, Verification
from smart_city.storage import InMemoryRepository
from smart_city.stores import ComplaintStore, SessionStore, UserStore
from smart_city.teams import TeamRoster

IMAGE = 'data:image/png;base64,aGVsbG8='
LEGIT = Verification(is_legitimate=True, reason='Issue clearly visible', confidence=0.92)
NOT_LEGIT = Verification(is_legitimate=False, reason='No damage visible', confidence=0.81)


def make_user(user_id='u1', role='citizen', email='ravi@example.com', points=0,
              state='Telangana', city='Hyderabad'):
    return User(id=user_id, name='Ravi', surname='Kumar', state=state, city=city, email=email,
                password_hash='secret', role=role, points=points, mobile='9000000000')


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def users(repo):
    return UserStore(repo)


@pytest.fixture
def complaints(repo):
    return ComplaintStore(repo)


@pytest.fixture
def session(repo):
    return SessionStore(repo)


@pytest.fixture
def roster():
    return TeamRoster()


@pytest.fixture
def dispatcher(users, complaints, roster, session):
    return Dispatcher(users, complaints, roster, session)


@pytest.fixture
def citizen(users):
    return users.add(make_user())


@pytest.fixture
def location():
    return Location(lat=17.385, lng=78.4867, full_address='Abids Road, Hyderabad')


class FakeAI:
    def __init__(self):
        self.verdict = LEGIT
        self.verify_calls = []
        self.video_calls = []

    def classify_image(self, image):
        return {'category': 'GARBAGE', 'description': 'Overflowing garbage bin on the footpath.'}

    def verify_image(self, image, category):
        self.verify_calls.append(category)
        return self.verdict

    def reverse_geocode(self, lat, lng):
        return 'Abids Road, Hyderabad, Telangana'

    def search_grounding(self, query):
        return {'text': f'Results for {query}', 'sources': []}

    def generate_video(self, image):
        self.video_calls.append(image)
        return 'https://videos.example.com/clip.mp4'


@pytest.fixture
def fake_ai():
    return FakeAI()


@pytest.fixture
def app(fake_ai):
    from smart_city.app import app as flask_app
    from smart_city.storage import db

    flask_app.config['TESTING'] = True
    flask_app.extensions['ai_service'] = fake_ai
    flask_app.extensions['team_rosters'].clear()
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()
