"""Shared pytest fixtures for bp-tracker tests."""

from datetime import datetime, timezone

import pytest

from bp_tracker import create_app, db
from bp_tracker.models import User, BloodPressureReading
from bp_tracker.utils.auth import generate_token


@pytest.fixture
def app(tmp_path):
    """Application bound to an in-memory SQLite database."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'JWT_SECRET_KEY': 'test-jwt-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'AUDIT_LOG_FILE': str(tmp_path / 'audit.log'),
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    user = User(name='Asha Rao', email='asha@example.com')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def other_user(app):
    user = User(name='Vikram Rao', email='vikram@example.com')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def auth_headers(user):
    return {'Authorization': f'Bearer {generate_token(user.id, user.email)}'}


@pytest.fixture
def make_reading():
    """Persist a reading for a user directly, bypassing the API."""
    def _make(owner, systolic, diastolic, timestamp, pulse_rate=None):
        reading = BloodPressureReading(
            user_id=owner.id,
            systolic=systolic,
            diastolic=diastolic,
            pulse_rate=pulse_rate,
            timestamp=timestamp.astimezone(timezone.utc).replace(tzinfo=None),
        )
        reading.update_category()
        db.session.add(reading)
        db.session.commit()
        return reading
    return _make


@pytest.fixture
def fixed_now():
    """Reference instant for window calculations."""
    return datetime(2024, 1, 20, 12, 0, 0, tzinfo=timezone.utc)
