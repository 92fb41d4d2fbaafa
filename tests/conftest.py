"""Shared fixtures: an isolated app per test plus SQL-backed core components."""

from datetime import timedelta

import pytest
from argon2 import PasswordHasher

from api import create_app
from api.config import TestingConfig
from models.base_model import utcnow
from models.db_storage import DBStorage
from models.stores import SqlCredentialStore, SqlFileStore, SqlSessionStore
from services.container import current_services
from services.sessions import SessionManager
from tests.helpers import JWT_SECRET, signup
from utils.security import PasswordVerifier, TokenIssuer

# Cheap argon2 parameters keep the suite fast
FAST_ARGON2 = {"ARGON2_TIME_COST": 1, "ARGON2_MEMORY_COST": 8, "ARGON2_PARALLELISM": 1}


class FakeClock:
    """Naive-UTC clock that only moves when told to."""

    def __init__(self, start=None):
        self.now = start or utcnow()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage(tmp_path):
    """DBStorage on a throwaway SQLite file with all tables created."""
    db = DBStorage(f"sqlite:///{tmp_path / 'unit.db'}")
    db.reload()
    yield db
    db.dispose()


@pytest.fixture
def passwords():
    return PasswordVerifier(PasswordHasher(time_cost=1, memory_cost=8, parallelism=1))


@pytest.fixture
def tokens():
    return TokenIssuer(secret=JWT_SECRET)


@pytest.fixture
def credential_store(storage):
    return SqlCredentialStore(storage)


@pytest.fixture
def session_store(storage):
    return SqlSessionStore(storage)


@pytest.fixture
def file_store(storage):
    return SqlFileStore(storage)


@pytest.fixture
def session_manager(credential_store, session_store, passwords, tokens, clock):
    return SessionManager(
        credentials=credential_store,
        sessions=session_store,
        passwords=passwords,
        tokens=tokens,
        clock=clock,
    )


@pytest.fixture
def app(tmp_path):
    config = TestingConfig(
        DATABASE_URL=f"sqlite:///{tmp_path / 'api.db'}",
        UPLOAD_FOLDER=str(tmp_path / "uploads"),
        JWT_SECRET=JWT_SECRET,
        **FAST_ARGON2,
    )
    app = create_app(config)
    yield app
    with app.app_context():
        current_services().storage.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    with app.app_context():
        yield current_services()


@pytest.fixture
def auth_tokens(client):
    """Token pair of a freshly signed-up account."""
    response = signup(client)
    assert response.status_code == 201
    return response.get_json()
