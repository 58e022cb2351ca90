"""
Shared fixtures

The database URL must be set before anything from eventledger is imported,
because settings and the connection pool are created at import time.
"""

import os
import tempfile
import uuid

_tmpdir = tempfile.mkdtemp(prefix="eventledger-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_tmpdir}/test.db"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["REMINDER_SIMULATED_DELAY_SECONDS"] = "0"
os.environ["BOOTSTRAP_ADMIN_EMAIL"] = "admin@example.com"
os.environ["BOOTSTRAP_ADMIN_PASSWORD"] = "admin-password"
os.environ["BOOTSTRAP_ADMIN_NAME"] = "Bootstrap Admin"
os.environ.pop("AI_API_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from eventledger.auth import hash_password
from eventledger.database import engine, run_migrations, connect_db, disconnect_db
from eventledger.main import app

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-password"


@pytest.fixture(scope="session", autouse=True)
def migrated():
    run_migrations()
    yield
    engine.dispose()


@pytest.fixture(autouse=True)
def clean_tables(migrated):
    with engine.begin() as conn:
        for table in ("attendance", "registrations", "events", "users"):
            conn.execute(text(f"DELETE FROM {table}"))
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def db():
    """Connected database for service-level tests"""
    await connect_db()
    yield
    await disconnect_db()


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def login(client, email, password):
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


def insert_admin(email, name="Second Admin", password="other-password"):
    """Admins cannot sign up through the API"""
    with engine.begin() as conn:
        conn.execute(
            text(
                "INSERT INTO users (id, name, email, password_hash, role, created_at) "
                "VALUES (:id, :name, :email, :password_hash, 'admin', CURRENT_TIMESTAMP)"
            ),
            {
                "id": str(uuid.uuid4()),
                "name": name,
                "email": email,
                "password_hash": hash_password(password),
            }
        )
    return password


@pytest.fixture
def admin_token(client):
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def other_admin_token(client):
    password = insert_admin("second@example.com")
    return login(client, "second@example.com", password)


def signup(client, email, name="Attendee", department=None, password="attendee-pw"):
    resp = client.post(
        "/auth/signup",
        json={"name": name, "email": email, "password": password, "department": department}
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_event(client, token, **overrides):
    body = {
        "title": "Intro to Async Python",
        "date": "2026-11-05T18:00:00",
        "location": "Room 101",
        "capacity": 10,
        "category": "Workshop",
    }
    body.update(overrides)
    resp = client.post("/events", json=body, headers=auth_header(token))
    assert resp.status_code == 200, resp.text
    return resp.json()["id"]


def register(client, event_id, email, name="Guest", department=None):
    return client.post(
        "/register",
        json={"event_id": event_id, "name": name, "email": email, "department": department}
    )
