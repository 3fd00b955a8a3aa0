# tests/conftest.py
"""
Pytest configuration and fixtures.
"""

import os

import pytest

# Set test environment before any notifier module reads settings
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
# Tests never reach a live grammar service
os.environ["LANGUAGETOOL_URL"] = ""

ADMIN_HEADERS = {"X-API-Key": os.environ["ADMIN_API_KEY"]}


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)


@pytest.fixture
def client():
    """
    Test client with a fresh schema and a fresh text-repair service.

    Entering the client runs the app lifespan (tables, repair cache,
    interceptor); tables are dropped again afterwards.
    """
    from fastapi.testclient import TestClient

    from notifier.database import Base, engine
    from notifier.main import app

    with TestClient(app) as test_client:
        yield test_client

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(client):
    """Session on the same in-memory database the client uses."""
    from notifier.database import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
