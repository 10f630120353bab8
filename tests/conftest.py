import random

import pytest

from groupify.infrastructure.database import AppDatabase
from groupify.sessions.store import SessionStore


@pytest.fixture
def db() -> AppDatabase:
    """Create an in-memory database for testing."""
    app_db = AppDatabase()
    app_db._init_test()
    return app_db


@pytest.fixture
def store(db: AppDatabase) -> SessionStore:
    return SessionStore(db.session_repo, rng=random.Random(42), origin="https://groupify.test")


@pytest.fixture
def other_store(db: AppDatabase) -> SessionStore:
    """A second device sharing the same durable store."""
    return SessionStore(db.session_repo, rng=random.Random(7), origin="https://groupify.test")
