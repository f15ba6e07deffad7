import asyncio
import os
import tempfile

# The app reads its configuration at import time, point it at a throwaway
# SQLite file before anything from quizform is imported.
_tmp_dir = tempfile.mkdtemp(prefix="quizform-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["DEFAULT_ADMIN_EMAIL"] = "admin@quizform.local"
os.environ["DEFAULT_ADMIN_PASSWORD"] = "Admin123!"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from quizform.database import drop_db_and_tables  # noqa: E402
from quizform.main import app  # noqa: E402


# --- Canned template definitions ---

SAMPLE_QUESTIONS = [
    {"title": "Your name", "type": "string", "required": True},
    {"title": "Age in years", "type": "number", "min": 1, "max": 120},
    {"title": "Email address", "type": "email", "required": True},
    {"title": "Favourite colour", "type": "radio", "required": True, "options": ["Red", "Blue"]},
    {"title": "Subscribe to news?", "type": "checkbox"},
]

SAMPLE_TEMPLATE = {
    "title": "Customer feedback",
    "description": "Tell us what you think about the product",
    "topic": "Other",
    "tags": ["Feedback", "product"],
    "questions": SAMPLE_QUESTIONS,
}


@pytest.fixture
def client():
    """TestClient on a fresh database; the lifespan recreates tables and the admin."""
    asyncio.run(drop_db_and_tables())
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register(client, name="Alice", email="alice@example.com", password="secret123") -> dict:
    resp = client.post(
        "/api/auth/register", json={"name": name, "email": email, "password": password}
    )
    assert resp.status_code == 201, resp.text
    return auth_headers(resp.json()["access_token"])


def create_template(client, headers, **overrides) -> dict:
    payload = {**SAMPLE_TEMPLATE, **overrides}
    resp = client.post("/api/templates", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def approve(client, admin_headers, template_id: int) -> dict:
    resp = client.post(f"/api/templates/{template_id}/approve", headers=admin_headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def question_ids(template: dict) -> list:
    return [str(q["id"]) for q in template["questions"]]


@pytest.fixture
def user_headers(client):
    return register(client)


@pytest.fixture
def other_headers(client):
    return register(client, name="Bob", email="bob@example.com")


@pytest.fixture
def admin_headers(client):
    resp = client.post(
        "/api/auth/login", json={"email": "admin@quizform.local", "password": "Admin123!"}
    )
    assert resp.status_code == 200, resp.text
    return auth_headers(resp.json()["access_token"])


@pytest.fixture
def active_template(client, user_headers, admin_headers):
    template = create_template(client, user_headers)
    return approve(client, admin_headers, template["id"])


@pytest.fixture
def valid_answers(active_template):
    name, age, email, colour, subscribe = question_ids(active_template)
    return {name: "Alice", age: 30, email: "alice@example.com", colour: "Blue", subscribe: True}
