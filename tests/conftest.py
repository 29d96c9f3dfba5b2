"""Shared fixtures: a fresh app and in-memory database per test"""

import sys
import os
import pytest
from datetime import datetime, timezone
from types import SimpleNamespace

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from models import db


NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope='function')
def app_context():
    """Create a fresh app context and database for each test"""
    app = create_app('testing')
    app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'  # In-memory database
    app.config['TESTING'] = True

    with app.app_context():
        db.create_all()

        yield app

        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app_context):
    """Flask test client bound to the fresh database"""
    with app_context.test_client() as client:
        yield client


@pytest.fixture
def now():
    return NOW


def make_entry(**overrides):
    """In-memory stand-in for a fully initialised learning entry"""
    fields = dict(
        word_id=1,
        mastered=False,
        mastered_at=None,
        practice_count=0,
        correct_count=0,
        streak_fi_en=0,
        streak_en_fi=0,
        attempts_fi_en=0,
        attempts_en_fi=0,
        correct_fi_en=0,
        correct_en_fi=0,
        last_practiced_fi_en=None,
        last_practiced_en_fi=None,
        ease_factor=2.5,
        interval=0,
        repetitions=0,
        next_review_date=None,
        last_reviewed=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)
