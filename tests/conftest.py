"""Pytest configuration and shared fixtures."""
import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

import app.chat.models  # noqa: F401  registers chat tables on Base.metadata
from app.core.database import SessionLocal, engine
from app.core.security import create_access_token
from app.models import Base, User
from main import create_app


@pytest.fixture(autouse=True)
def db_schema():
    """Create a fresh schema for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def users(db):
    """A customer, an admin and a superadmin."""
    created = {
        "customer": User(id="u1", email="u1@example.com", first_name="Uma", last_name="Reyes", role="customer"),
        "admin": User(id="admin1", email="admin1@example.com", first_name="Ada", last_name="Stone", role="admin"),
        "superadmin": User(id="root", email="root@example.com", first_name="Sam", last_name="Hale", role="superadmin"),
    }
    db.add_all(created.values())
    db.commit()
    return created


@pytest.fixture
def tokens(users):
    return {role: create_access_token(user.id) for role, user in users.items()}


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    """Test client sharing one event loop across all WebSocket sessions."""
    with TestClient(app) as test_client:
        yield test_client
