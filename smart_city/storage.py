"""
Key-value persistence for the three namespaces.

Each namespace is read as a full snapshot and written as a full replacement.
There is no locking and no versioning: one writer is assumed.
"""

import json
import secrets
from datetime import datetime

from flask import session as flask_session
from flask_sqlalchemy import SQLAlchemy

USERS_KEY = 'smart_city_users'
COMPLAINTS_KEY = 'smart_city_complaints'
SESSION_KEY = 'smart_city_session'

db = SQLAlchemy()


class KeyValueEntry(db.Model):
    __tablename__ = 'key_value_entries'

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Repository:
    def load(self, key, default=None):
        raise NotImplementedError

    def save(self, key, value):
        raise NotImplementedError

    def remove(self, key):
        raise NotImplementedError


class InMemoryRepository(Repository):
    """Dict-backed repository. Values are stored as JSON text like the real ones."""

    def __init__(self, initial=None):
        self._data = {}
        for key, value in (initial or {}).items():
            self.save(key, value)

    def load(self, key, default=None):
        raw = self._data.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def save(self, key, value):
        self._data[key] = json.dumps(value)

    def remove(self, key):
        self._data.pop(key, None)


class SQLAlchemyRepository(Repository):
    def load(self, key, default=None):
        entry = db.session.get(KeyValueEntry, key)
        if entry is None:
            return default
        return json.loads(entry.value)

    def save(self, key, value):
        entry = db.session.get(KeyValueEntry, key)
        if entry is None:
            entry = KeyValueEntry(key=key)
            db.session.add(entry)
        entry.value = json.dumps(value)
        entry.updated_at = datetime.utcnow()
        db.session.commit()

    def remove(self, key):
        entry = db.session.get(KeyValueEntry, key)
        if entry is not None:
            db.session.delete(entry)
            db.session.commit()


class BrowserSessionRepository(SQLAlchemyRepository):
    """
    Server-side namespace scoped to one browser.

    The cookie only carries a random token; the snapshot itself lives in the
    key-value table under ``<key>:<token>`` so that one browser's session
    never overwrites another's.
    """

    def _scoped(self, key):
        token = flask_session.get('sid')
        if token is None:
            token = flask_session['sid'] = secrets.token_hex(16)
        return f'{key}:{token}'

    def load(self, key, default=None):
        return super().load(self._scoped(key), default)

    def save(self, key, value):
        super().save(self._scoped(key), value)

    def remove(self, key):
        super().remove(self._scoped(key))


def prune_sessions(max_age, now=None):
    """Delete browser session snapshots not written for longer than ``max_age``."""
    cutoff = (now or datetime.utcnow()) - max_age
    stale = KeyValueEntry.query.filter(
        KeyValueEntry.key.like(f'{SESSION_KEY}:%'),
        KeyValueEntry.updated_at < cutoff,
    )
    count = stale.delete(synchronize_session=False)
    db.session.commit()
    return count
