"""
Smart City Complaint Portal
Flask JSON API over the complaint lifecycle, team dispatch and points
"""

import base64
import logging
import os
from datetime import timedelta
from functools import wraps

from flask import Flask, current_app, jsonify, request
from flask_login import LoginManager, UserMixin, current_user, login_required, login_user, logout_user
from pydantic import ValidationError as RecordValidationError

from .ai import GeminiService
from .auth import login as check_login, signup as register_user
from .dispatch import Dispatcher, parse_category
from .errors import ComplaintNotFound, ReporterNotFound, SmartCityError, ValidationError
from .models import ComplaintStatus, Location
from .stats import (category_breakdown, filter_complaints, local_complaints, my_complaints,
                    resolution_rate, status_counts)
from .storage import BrowserSessionRepository, SQLAlchemyRepository, db, prune_sessions
from .stores import ComplaintStore, SessionStore, UserStore, update_profile_image
from .teams import TeamRoster


def _env_flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# ============= CONFIGURATION =============
app = Flask(__name__)
app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'smart-city-secret-key-2024')
app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv('SMART_CITY_DATABASE_URI', 'sqlite:///smart_city.db')
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
app.config['MAX_CONTENT_LENGTH'] = 16 * 1024 * 1024  # 16MB
app.config['ALLOWED_EXTENSIONS'] = {'png', 'jpg', 'jpeg', 'gif', 'webp'}
app.config['GEMINI_API_KEY'] = os.getenv('GEMINI_API_KEY')
app.config['GEMINI_MODEL'] = os.getenv('GEMINI_MODEL', 'gemini-1.5-pro')
app.config['GEMINI_SEARCH_MODEL'] = os.getenv('GEMINI_SEARCH_MODEL', 'gemini-1.5-flash')
app.config['GEMINI_VIDEO_MODEL'] = os.getenv('GEMINI_VIDEO_MODEL', 'veo-3.1-fast-generate-preview')
app.config['GEOCODER_USER_AGENT'] = os.getenv('GEOCODER_USER_AGENT', 'smart-city-complaints')
# Plain-text credentials and the two demo accounts. Turn off to hash passwords.
app.config['INSECURE_DEMO_MODE'] = _env_flag('INSECURE_DEMO_MODE', True)
app.config['EMAIL_CASE_SENSITIVE'] = _env_flag('EMAIL_CASE_SENSITIVE', False)
# browser session snapshots older than the remember cookie are pruned
app.config['REMEMBER_COOKIE_DURATION'] = timedelta(days=365)

# Initialize extensions
db.init_app(app)
login_manager = LoginManager(app)

app.extensions['ai_service'] = GeminiService(
    api_key=app.config['GEMINI_API_KEY'],
    model=app.config['GEMINI_MODEL'],
    search_model=app.config['GEMINI_SEARCH_MODEL'],
    video_model=app.config['GEMINI_VIDEO_MODEL'],
    geocoder_user_agent=app.config['GEOCODER_USER_AGENT'],
)
# one roster per jurisdiction, keyed by (state, city)
app.extensions['team_rosters'] = {}


# ============= STORES =============
def user_store():
    return UserStore(SQLAlchemyRepository())


def complaint_store():
    return ComplaintStore(SQLAlchemyRepository())


def session_store():
    return SessionStore(BrowserSessionRepository())


def team_roster(user=None):
    user = user or current_user.user
    rosters = current_app.extensions['team_rosters']
    return rosters.setdefault((user.state, user.city), TeamRoster())


def ai_service():
    return current_app.extensions['ai_service']


def dispatcher():
    return Dispatcher(user_store(), complaint_store(), team_roster(), session_store())


def local_complaint(complaint_id):
    """A complaint in the signed-in admin's state and city; anything else is not found."""
    user = current_user.user
    complaint = complaint_store().get(complaint_id)
    if complaint is None or (complaint.state, complaint.city) != (user.state, user.city):
        raise ComplaintNotFound(complaint_id)
    return complaint


# ============= HELPER FUNCTIONS =============
def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in app.config['ALLOWED_EXTENSIONS']


def payload():
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def read_image(data):
    """Uploaded file or data URL, returned as a base64 data URL."""
    image_file = request.files.get('image')
    if image_file and image_file.filename:
        if not allowed_file(image_file.filename):
            raise ValidationError("Unsupported image type.")
        encoded = base64.b64encode(image_file.read()).decode('utf-8')
        mime_type = image_file.mimetype or 'image/jpeg'
        return f"data:{mime_type};base64,{encoded}"
    image = data.get('image')
    if image is not None and not isinstance(image, str):
        raise ValidationError("Image must be a data URL string.")
    return image


def read_text(data, field):
    value = data.get(field)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be text.")
    return value


def read_location(data):
    if data.get('lat') in (None, '') or data.get('lng') in (None, ''):
        return None
    try:
        lat, lng = float(data['lat']), float(data['lng'])
    except (TypeError, ValueError):
        raise ValidationError("Invalid coordinates.")
    return Location(lat=lat, lng=lng, full_address=data.get('fullAddress') or None)


def public_user(user):
    data = user.to_dict()
    data.pop('passwordHash', None)
    return data


def role_required(role):
    def decorator(f):
        @wraps(f)
        @login_required
        def decorated_function(*args, **kwargs):
            if current_user.role != role:
                return jsonify({'error': 'You do not have permission to access this page.'}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def start_session(user, role):
    if role == 'admin':
        # a fresh console starts with every team of its own city on duty
        team_roster(user).reseed()
    prune_sessions(app.config['REMEMBER_COOKIE_DURATION'])
    session_store().start(user, role)
    login_user(SessionAccount(user, role), remember=True)


@app.errorhandler(SmartCityError)
def handle_smart_city_error(error):
    app.logger.info("%s: %s", type(error).__name__, error.message)
    return jsonify({'error': error.message}), error.status_code


@app.errorhandler(RecordValidationError)
def handle_record_validation_error(error):
    app.logger.info("Rejected malformed record: %s", error)
    return jsonify({'error': 'Invalid request data.'}), 400


# ============= FLASK-LOGIN CONFIG =============
class SessionAccount(UserMixin):
    def __init__(self, user, role):
        self.user = user
        self.role = role
        self.id = user.id


@login_manager.user_loader
def load_user(user_id):
    current = session_store().current()
    if current is None or current[0].id != user_id:
        return None
    user, role = current
    # the roster has the latest points even when another session credited them
    return SessionAccount(user_store().get(user_id) or user, role)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'error': 'Please log in to access this page.'}), 401


# ============= AUTH ROUTES =============
@app.route('/')
def index():
    return jsonify({'message': 'Smart City complaint portal is running'})


@app.route('/api/login', methods=['POST'])
def login():
    data = payload()
    role = data.get('role', 'citizen')
    user = check_login(user_store(), role, data.get('email', ''), data.get('password', ''),
                       insecure_demo_mode=app.config['INSECURE_DEMO_MODE'])
    start_session(user, role)
    return jsonify({'user': public_user(user), 'role': role})


@app.route('/api/signup', methods=['POST'])
def signup():
    data = payload()
    role = data.get('role', 'citizen')
    user = register_user(user_store(), role, data,
                         insecure_demo_mode=app.config['INSECURE_DEMO_MODE'],
                         email_case_sensitive=app.config['EMAIL_CASE_SENSITIVE'])
    start_session(user, role)
    return jsonify({'user': public_user(user), 'role': role}), 201


@app.route('/api/logout', methods=['POST'])
@login_required
def logout():
    session_store().clear()
    logout_user()
    return jsonify({'logged_out': True})


@app.route('/api/me')
@login_required
def me():
    return jsonify({'user': public_user(current_user.user), 'role': current_user.role})


@app.route('/api/profile/image', methods=['POST'])
@login_required
def update_profile_picture():
    image = read_image(payload())
    if not image:
        raise ValidationError("No image uploaded.")
    user = update_profile_image(user_store(), session_store(), current_user.user, image)
    return jsonify({'user': public_user(user)})


# ============= CITIZEN ROUTES =============
@app.route('/api/analyze', methods=['POST'])
@login_required
def analyze_image():
    image = read_image(payload())
    if not image:
        raise ValidationError("No image uploaded.")
    return jsonify(ai_service().classify_image(image))


@app.route('/api/geocode', methods=['POST'])
@login_required
def geocode():
    location = read_location(payload())
    if location is None:
        raise ValidationError("Coordinates are required.")
    address = ai_service().reverse_geocode(location.lat, location.lng)
    return jsonify({'lat': location.lat, 'lng': location.lng, 'fullAddress': address})


@app.route('/api/complaints', methods=['POST'])
@role_required('citizen')
def new_complaint():
    data = payload()
    image = read_image(data)
    location = read_location(data)
    if not image or location is None:
        raise ValidationError("A photo and a detected location are required.")
    category = parse_category(data.get('category', 'GARBAGE'))
    description = read_text(data, 'description')

    verification = ai_service().verify_image(image, category)
    complaint = dispatcher().create_complaint(
        current_user.user, category, description, image, location, verification)
    return jsonify(complaint.to_dict()), 201


@app.route('/api/complaints/mine')
@role_required('citizen')
def view_my_complaints():
    complaints = my_complaints(complaint_store().all(), current_user.id)
    return jsonify([c.to_dict() for c in complaints])


@app.route('/api/complaints/animate', methods=['POST'])
@role_required('citizen')
def animate_complaint():
    data = payload()
    complaint = None
    complaint_id = data.get('complaintId')
    if complaint_id:
        complaint = complaint_store().get(complaint_id)
        if complaint is None or complaint.user_id != current_user.id:
            raise ComplaintNotFound(complaint_id)
        image = complaint.image
    else:
        image = read_image(data)
    if not image:
        raise ValidationError("No image uploaded.")

    video_url = ai_service().generate_video(image)
    if complaint is not None:
        complaint.video_url = video_url
        complaint_store().replace(complaint)
    return jsonify({'videoUrl': video_url})


@app.route('/api/complaints/stats')
@login_required
def get_complaint_stats():
    complaints = complaint_store().all()
    user = current_user.user
    if current_user.role == 'admin':
        complaints = local_complaints(complaints, user.state, user.city)
    else:
        complaints = my_complaints(complaints, user.id)

    stats = status_counts(complaints)
    stats['resolution_rate'] = resolution_rate(complaints)
    if current_user.role == 'admin':
        stats['categories'] = category_breakdown(complaints)
    else:
        stats['points'] = user.points
    return jsonify(stats)


# ============= ADMIN ROUTES =============
@app.route('/api/admin/complaints')
@role_required('admin')
def view_complaints():
    user = current_user.user
    status = request.args.get('status', 'ALL')
    if status != 'ALL' and status not in ComplaintStatus.__members__:
        raise ValidationError(f"Unknown status: {status}")
    complaints = local_complaints(complaint_store().all(), user.state, user.city)
    complaints = filter_complaints(complaints, status, request.args.get('q', ''))
    return jsonify([c.to_dict() for c in complaints])


@app.route('/api/admin/complaints/<complaint_id>/assign', methods=['POST'])
@role_required('admin')
def assign_complaint(complaint_id):
    local_complaint(complaint_id)
    complaint = dispatcher().assign(complaint_id)
    return jsonify(complaint.to_dict())


@app.route('/api/admin/complaints/<complaint_id>/resolve', methods=['POST'])
@role_required('admin')
def resolve_complaint(complaint_id):
    local_complaint(complaint_id)
    complaint = dispatcher().resolve(complaint_id)
    return jsonify(complaint.to_dict())


@app.route('/api/admin/complaints/<complaint_id>', methods=['DELETE'])
@role_required('admin')
def delete_complaint(complaint_id):
    local_complaint(complaint_id)
    dispatcher().delete(complaint_id)
    return jsonify({'deleted': True})


@app.route('/api/admin/teams')
@role_required('admin')
def get_teams():
    grouped = team_roster().by_department()
    return jsonify({dept.value: [t.to_dict() for t in teams] for dept, teams in grouped.items()})


@app.route('/api/admin/reporters/<user_id>')
@role_required('admin')
def get_reporter(user_id):
    reporter = user_store().get(user_id)
    if reporter is None:
        raise ReporterNotFound(user_id)
    return jsonify(public_user(reporter))


@app.route('/api/admin/search', methods=['POST'])
@role_required('admin')
def search_grounding():
    query = (payload().get('query') or '').strip()
    if not query:
        raise ValidationError("Search query is required.")
    return jsonify(ai_service().search_grounding(query))


# ============= INITIALIZATION =============
def init_app():
    """Initialize the application"""
    with app.app_context():
        db.create_all()
        pruned = prune_sessions(app.config['REMEMBER_COOKIE_DURATION'])
        if pruned:
            app.logger.info("Pruned %d stale browser sessions", pruned)
        if app.config['INSECURE_DEMO_MODE']:
            app.logger.warning("Insecure demo mode: credentials are stored in plain text")
            app.logger.info("Officer demo login: admin@ghmc.gov.in / admin123")
            app.logger.info("Citizen demo login: citizen@gmail.com / citizen123")
        app.logger.info("Application initialized successfully!")


# ============= MAIN =============
if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    init_app()
    app.logger.info("Starting Smart City complaint portal at http://localhost:5000")
    app.run(debug=True, host='0.0.0.0', port=5000)
