"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import timedelta
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.config import settings
from app.db.base import Base, utcnow
from app.db.session import get_db
from app.api.v1.dependencies import get_identity_provider
from app.identity.provider import IdentityProfile, IdentityProvider
from app.models.session import AuthSession
from app.models.user import User
from app.services.exceptions import AuthExchangeFailedError
from app.services.session_service import SessionService


# In-memory SQLite for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class MockIdentityProvider(IdentityProvider):
    """Identity provider double returning a preset profile."""

    def __init__(self):
        self.profile = IdentityProfile(
            subject="google-sub-1",
            email="person@wit.edu",
            name="Test Person",
            picture="https://example.com/p.png",
        )
        self.fail = False
        self.exchanged_codes = []

    def authorization_url(self, state: str, domain_hint: Optional[str] = None) -> str:
        return f"https://accounts.example.com/auth?state={state}&hd={domain_hint}"

    def exchange_code(self, code: str) -> IdentityProfile:
        self.exchanged_codes.append(code)
        if self.fail:
            raise AuthExchangeFailedError("Failed to exchange authorization code")
        return self.profile


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def identity_provider():
    """Create a mock identity provider for testing."""
    return MockIdentityProvider()


@pytest.fixture(scope="function")
def client(db_session, identity_provider):
    """Create a test client with overridden dependencies."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    def override_get_identity_provider():
        return identity_provider

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = override_get_identity_provider

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Factory inserting users straight into the store."""
    counter = {"n": 0}

    def _make_user(role: Optional[str] = None, is_admin=None, email: Optional[str] = None, name: str = "User"):
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@wit.edu",
            name=f"{name} {counter['n']}",
            role=role,
            is_admin=is_admin,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def login_as(client, db_session):
    """Return a TestClient whose cookie carries a logged-in session for ``user``."""
    clients = []

    def _login_as(user: User) -> TestClient:
        record = AuthSession(
            id=SessionService.new_token(),
            user_id=user.id,
            email=user.email,
            name=user.name,
            picture=user.picture,
            logged_in=True,
            expires_at=utcnow() + timedelta(days=1),
        )
        db_session.add(record)
        db_session.commit()

        user_client = TestClient(app, cookies={settings.SESSION_COOKIE_NAME: record.id})
        clients.append(user_client)
        return user_client

    yield _login_as

    for user_client in clients:
        user_client.close()


@pytest.fixture
def admin(make_user):
    return make_user(role="admin", name="Admin")


@pytest.fixture
def alice(make_user):
    return make_user(role="user", name="Alice")


@pytest.fixture
def bob(make_user):
    return make_user(name="Bob")
