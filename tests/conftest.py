"""
Pytest configuration and shared fixtures for all tests.

This file is automatically loaded by pytest and provides:
  - Test configuration (env vars)
  - Profile builders and an in-memory store for feed/group tests
  - A mocked Firebase app for Firestore adapter tests
"""

import os
import pytest
from unittest.mock import MagicMock

from flatmatch.models.profile import GeoPoint, PreferencesProfile, Profile
from flatmatch.tools.repository import InMemoryStore

BERLIN = GeoPoint(lat=52.52, lng=13.405)
MUNICH = GeoPoint(lat=48.1351, lng=11.582)


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """
    Setup test environment variables before running any tests.

    This ensures tests run with predictable configuration and don't
    depend on local .env files.
    """
    test_env = {
        "REPOSITORY_BACKEND": "memory",
        "GOOGLE_APPLICATION_CREDENTIALS": "/config/test-serviceAccountKey.json",
        "DEBUG": "True",
    }

    for key, value in test_env.items():
        os.environ[key] = value


@pytest.fixture
def make_profile():
    """
    Build a feed-eligible Profile with overridable fields.

    Defaults: 23 years old, TU Berlin, Berlin centre, one photo, seeking a room.

    Example:
        def test_something(make_profile):
            viewer = make_profile("viewer", has_room=True)
    """

    def _make(user_id: str, **overrides) -> Profile:
        data = {
            "id": user_id,
            "age": 23,
            "city": "Berlin",
            "university": "TU Berlin",
            "has_room": False,
            "location": BERLIN,
            "photos": [f"{user_id}.jpg"],
        }
        data.update(overrides)
        return Profile(**data)

    return _make


@pytest.fixture
def store():
    """Provide an empty in-memory collaborator store."""
    return InMemoryStore()


@pytest.fixture
def viewer_store(store, make_profile):
    """
    Store seeded with a viewer who accepts ages 20-26 anywhere within 50 km.

    Candidates are added by each test.
    """
    store.add_profile(make_profile("viewer"))
    store.add_preferences(
        PreferencesProfile(
            user_id="viewer",
            age_min=20,
            age_max=26,
            max_distance_km=50,
        )
    )
    return store


@pytest.fixture
def mock_firebase_app(monkeypatch):
    """
    Provide a mock Firebase app for testing.

    Use this fixture in tests that need to mock Firestore calls.

    Example:
        def test_something(mock_firebase_app):
            # Firestore calls will use mock
            pass
    """
    from flatmatch.tools import firestore_tools

    mock_app = MagicMock()
    mock_db = MagicMock()

    monkeypatch.setattr("firebase_admin._apps", [mock_app])
    monkeypatch.setattr("firebase_admin.initialize_app", MagicMock(return_value=mock_app))
    monkeypatch.setattr("firebase_admin.firestore.client", MagicMock(return_value=mock_db))
    monkeypatch.setattr(firestore_tools, "_db", None)

    return {"app": mock_app, "db": mock_db}
