"""
Shared fixtures for the test suite.

Every test gets its own in-memory SQLite database. The environment is set before
any usermgmt module is imported so Settings never points at a real database and
bcrypt runs at its minimum cost.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DISABLE_AUTH"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from usermgmt.api.dependencies import get_password_hasher
from usermgmt.core.database import Base, get_db
from usermgmt.core.security import PasswordHasher
from usermgmt.models.user import User  # noqa: F401  registers the users table
from usermgmt.repositories.user_repository import UserRepository
from usermgmt.services.user_service import UserService
from usermgmt.types import UserRequest


@pytest.fixture
def engine():
    # StaticPool keeps a single connection so every session sees the same memory DB
    engine_ = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine_)
    yield engine_
    engine_.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def repository(db) -> UserRepository:
    return UserRepository(db)


@pytest.fixture
def service(repository, hasher) -> UserService:
    return UserService(repository, hasher)


@pytest.fixture
def alice_request() -> UserRequest:
    return UserRequest(
        username="alice",
        email="a@x.com",
        name="Alice",
        password="secret1",
        role="member",
    )


@pytest.fixture
def client(session_factory, hasher):
    """TestClient wired to the per-test database."""
    from usermgmt.main import create_app

    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_password_hasher] = lambda: hasher

    with TestClient(app) as c:
        yield c
