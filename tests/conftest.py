"""
Pytest configuration and fixtures for testing.

Provides:
- In-memory SQLite database per test
- FastAPI test client with the database dependency overridden
- A recorder standing in for the Celery email queue
- Helpers to create users and tokens
"""

import os

# Settings are read at import time; point them at test-friendly values first.
os.environ.setdefault("DATABASE_URI", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("JSON_LOGS", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from authflow.core.database import Base, get_db
from authflow.core.security import get_password_hash
from authflow.models.user import User
from main import app


SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "pw123456"


@pytest.fixture
def db_session():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def queued_emails(monkeypatch):
    """
    Capture verification emails instead of queueing them on Redis.
    """
    sent = []

    def fake_queue(task, *args, **kwargs):
        sent.append({"task": task.name, **kwargs})
        return True

    monkeypatch.setattr("authflow.core.verification.queue_task_safely", fake_queue)
    return sent


@pytest.fixture
def make_user(db_session):
    """Factory inserting a user directly into the database."""
    def _make_user(
        email: str = "alice@example.com",
        name: str = "Alice",
        password: str = DEFAULT_PASSWORD,
        verified: bool = True,
    ) -> User:
        user = User(
            id=uuid.uuid4(),
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            email_verified_at=datetime.now(timezone.utc) if verified else None,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client, email: str = "alice@example.com", password: str = DEFAULT_PASSWORD):
    return client.post("/api/login", json={"email": email, "password": password})
