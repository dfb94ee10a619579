"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client
- Session cookies for a given email
- Sample job and bid payloads
"""

import os

# Must be set before the app (and its settings) are imported
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.database import Database, get_db
from main import app


@pytest.fixture
def database():
    """
    Fresh in-memory SQLite database for each test.
    """
    test_database = Database("sqlite://")
    test_database.create_all()
    try:
        yield test_database
    finally:
        test_database.drop_all()
        test_database.dispose()


@pytest.fixture
def db_session(database):
    """
    Database session shared by the test and the app under test.
    """
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


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


@pytest.fixture
def login(client):
    """
    Log the test client in as `email` (replacing any previous session cookie).
    """
    def _login(email: str):
        client.cookies.clear()
        response = client.post("/jwt", json={"email": email})
        assert response.status_code == 200
        return response

    return _login


@pytest.fixture
def production_settings(monkeypatch):
    """Run the test with ENVIRONMENT=production."""
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    return settings


@pytest.fixture
def sample_job_data():
    """Sample job data for testing"""
    return {
        "title": "Senior Python Developer",
        "category": "Web Development",
        "deadline": "2030-06-30",
        "description": "Build and maintain a FastAPI backend for our marketplace.",
        "min_price": 500,
        "max_price": 1500,
        "buyer": {
            "email": "alice@example.com",
            "name": "Alice",
            "photo": "https://example.com/alice.png",
        },
    }


@pytest.fixture
def create_job(client, sample_job_data):
    """
    Create a job through the API and return its id.
    Keyword arguments override fields of sample_job_data.
    """
    def _create(**overrides):
        job_data = {**sample_job_data, **overrides}
        response = client.post("/job", json=job_data)
        assert response.status_code == 201, response.text
        return response.json()["insertedId"]

    return _create


@pytest.fixture
def sample_bid_data():
    """Sample bid data for testing (jobId filled in by the test)"""
    return {
        "email": "bob@example.com",
        "price": 900,
        "comment": "I can deliver this in two weeks.",
        "deadline": "2030-06-15",
        "buyer": {"email": "alice@example.com", "name": "Alice"},
    }
