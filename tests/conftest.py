"""
Pytest fixtures for the job board API.

MongoDB is replaced by mongomock and the account store by a throwaway
SQLite file, so the suite needs no running services.
"""

import os
import tempfile
import uuid

# IMPORTANT: Set environment variables BEFORE any imports from jobboard
# so Settings (cached on first use) and the SQLAlchemy engine pick them up.
_DB_DIR = tempfile.mkdtemp(prefix="jobboard-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'accounts.db')}"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SMTP_HOST"] = ""
os.environ["JWT_SECRET_KEY"] = "test-secret-key-1234"

import mongomock
import pytest
from fastapi.testclient import TestClient

from jobboard.core.auth import PURPOSE_VERIFY_EMAIL, create_action_token
from jobboard.db.mongodb import set_mongo_client
from jobboard.db.postgres import engine, metadata
from jobboard.services.auth_service import AuthService
from jobboard.services.realtime import reset_listener_hub

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_stores():
    """Empty document store, accounts table and listener hub for every test."""
    set_mongo_client(mongomock.MongoClient())
    reset_listener_hub()
    metadata.drop_all(engine)
    metadata.create_all(engine)
    yield
    reset_listener_hub()


@pytest.fixture
def client():
    """FastAPI test client fixture."""
    from jobboard.main import app
    return TestClient(app)


@pytest.fixture
def register_user():
    """Register and verify an account directly through the service; returns its uid."""
    def _register(role="jobseeker", email=None, verify=True, **extra):
        email = email or f"{role}-{uuid.uuid4().hex[:8]}@acme.io"
        service = AuthService()
        user_id = service.register_with_email(email, PASSWORD, role, extra)
        if verify:
            service.verify_email(create_action_token(user_id, PURPOSE_VERIFY_EMAIL))
        return {"user_id": user_id, "email": email}
    return _register


@pytest.fixture
def make_user(client, register_user):
    """
    Registered, verified and logged-in user.

    Returns a dict with user_id, email, token and ready-made auth headers.
    """
    def _make(role="jobseeker", **extra):
        user = register_user(role, **extra)
        response = client.post("/api/auth/login", json={"email": user["email"], "password": PASSWORD})
        assert response.status_code == 200, response.text
        token = response.json()["access_token"]
        return {**user, "token": token, "headers": {"Authorization": f"Bearer {token}"}}
    return _make


@pytest.fixture
def employer(make_user):
    return make_user("employer", full_name="Erin Boss", company_name="Acme Corp")


@pytest.fixture
def job_seeker(make_user):
    return make_user("jobseeker", full_name="Sam Seeker")


@pytest.fixture
def job_payload():
    return {
        "title": "Backend Engineer",
        "company": "Acme Corp",
        "location": "Berlin, Germany",
        "job_type": "Full-time",
        "experience_level": "Mid Level",
        "description": "Build APIs with Python and MongoDB.",
        "industry": "Technology",
        "salary": "$80,000",
        "requirements": ["Python", "FastAPI"],
        "remote": True,
    }


@pytest.fixture
def posted_job(client, employer, job_payload):
    response = client.post("/api/jobs", json=job_payload, headers=employer["headers"])
    assert response.status_code == 201, response.text
    return response.json()["id"]
