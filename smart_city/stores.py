"""User, Complaint and Session stores over a key-value repository."""

import logging

from .models import Complaint, User
from .storage import COMPLAINTS_KEY, SESSION_KEY, USERS_KEY

logger = logging.getLogger(__name__)


class UserStore:
    def __init__(self, repository):
        self.repository = repository

    def all(self):
        return [User.from_dict(u) for u in self.repository.load(USERS_KEY, [])]

    def _save_all(self, users):
        self.repository.save(USERS_KEY, [u.to_dict() for u in users])

    def get(self, user_id):
        return next((u for u in self.all() if u.id == user_id), None)

    def find_by_email(self, email, case_sensitive=False):
        if case_sensitive:
            return next((u for u in self.all() if u.email == email), None)
        email = email.lower()
        return next((u for u in self.all() if u.email.lower() == email), None)

    def add(self, user):
        users = self.all()
        users.append(user)
        self._save_all(users)
        return user

    def update(self, user):
        users = self.all()
        self._save_all([user if u.id == user.id else u for u in users])
        return user

    def credit_points(self, user_id, amount):
        """Add ``amount`` to the user's balance. Returns the updated user, or None if unknown."""
        users = self.all()
        for user in users:
            if user.id == user_id:
                user.points += amount
                self._save_all(users)
                return user
        return None


class ComplaintStore:
    def __init__(self, repository):
        self.repository = repository

    def all(self):
        return [Complaint.from_dict(c) for c in self.repository.load(COMPLAINTS_KEY, [])]

    def _save_all(self, complaints):
        self.repository.save(COMPLAINTS_KEY, [c.to_dict() for c in complaints])

    def get(self, complaint_id):
        return next((c for c in self.all() if c.id == complaint_id), None)

    def add(self, complaint):
        # newest first
        self._save_all([complaint] + self.all())
        return complaint

    def replace(self, complaint):
        self._save_all([complaint if c.id == complaint.id else c for c in self.all()])
        return complaint

    def delete(self, complaint_id):
        complaints = self.all()
        remaining = [c for c in complaints if c.id != complaint_id]
        if len(remaining) == len(complaints):
            return False
        self._save_all(remaining)
        return True


class SessionStore:
    """The signed-in identity: ``{"user": {...}, "role": "citizen"|"admin"}``."""

    def __init__(self, repository):
        self.repository = repository

    def current(self):
        data = self.repository.load(SESSION_KEY)
        if not data:
            return None
        return User.from_dict(data['user']), data['role']

    def current_user(self):
        current = self.current()
        return current[0] if current else None

    def start(self, user, role):
        self.repository.save(SESSION_KEY, {'user': user.to_dict(), 'role': role})

    def refresh(self, user):
        """Replace the session copy if ``user`` is the one signed in."""
        current = self.current()
        if current is None or current[0].id != user.id:
            return False
        self.start(user, current[1])
        return True

    def clear(self):
        self.repository.remove(SESSION_KEY)


def update_profile_image(users, session, user, image):
    updated = user.model_copy(update={'profile_image': image})
    users.update(updated)
    session.refresh(updated)
    logger.info("Profile image updated for user %s", user.id)
    return updated
