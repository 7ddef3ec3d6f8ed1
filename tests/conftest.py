"""
Shared pytest fixtures for the Remodra API test suite.

Provides:
    - db: Session on a fresh in-memory SQLite schema (autouse, per test)
    - client: TestClient running the app lifespan (tables + achievement seed)
    - make_contractor: factory for contractor accounts
    - contractor / headers: default tenant on the pro plan and its bearer header
    - other_headers: a second tenant for isolation checks
    - admin_headers: a super admin
    - fake_ai: replaces the OpenAI call with canned answers
"""

import os

# Must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SECURITY_HEADERS_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ.pop("OPENAI_API_KEY", None)

import itertools  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from remodra import models, models_achievement, models_invoice  # noqa: E402,F401
from remodra.auth import create_access_token  # noqa: E402
from remodra.database import Base, SessionLocal, engine  # noqa: E402
from remodra.main import app  # noqa: E402
from remodra.models import Contractor  # noqa: E402
from remodra.security_utils import hash_password  # noqa: E402
from remodra.services import ai_service  # noqa: E402

PASSWORD = "secret123"
_counter = itertools.count(1)
_password_hash = None


def _hashed_password() -> str:
    # bcrypt is slow; one hash serves every test account
    global _password_hash
    if _password_hash is None:
        _password_hash = hash_password(PASSWORD)
    return _password_hash


def bearer(contractor: Contractor) -> dict:
    return {"Authorization": f"Bearer {create_access_token(contractor)}"}


# ── Database & app ───────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    with TestClient(app) as test_client:
        yield test_client


# ── Accounts ─────────────────────────────────────────────────────────────


@pytest.fixture()
def make_contractor(db):
    def _make(**overrides) -> Contractor:
        n = next(_counter)
        data = {
            "username": f"contractor{n}",
            "email": f"contractor{n}@example.com",
            "password": _hashed_password(),
            "first_name": "Test",
            "last_name": f"Contractor{n}",
            "company_name": f"Decks & Co {n}",
            "role": "contractor",
            "plan": "pro",
            "language": "en",
        }
        data.update(overrides)
        contractor = Contractor(**data)
        db.add(contractor)
        db.commit()
        db.refresh(contractor)
        return contractor

    return _make


@pytest.fixture()
def contractor(make_contractor):
    return make_contractor()


@pytest.fixture()
def headers(contractor):
    return bearer(contractor)


@pytest.fixture()
def other_contractor(make_contractor):
    return make_contractor()


@pytest.fixture()
def other_headers(other_contractor):
    return bearer(other_contractor)


@pytest.fixture()
def auth_for():
    """Bearer header builder for contractors made inside a test"""
    return bearer


@pytest.fixture()
def password():
    """Plain-text password of every account made by make_contractor"""
    return PASSWORD


@pytest.fixture()
def admin_headers(make_contractor):
    return bearer(make_contractor(role="super_admin"))


# ── Convenience records ──────────────────────────────────────────────────


@pytest.fixture()
def new_client(client, headers):
    """Create a client via the API and return its JSON"""

    def _create(**overrides) -> dict:
        payload = {"firstName": "Jane", "lastName": "Doe", "email": "jane@example.com"}
        payload.update(overrides)
        res = client.post("/api/protected/clients", json=payload, headers=headers)
        assert res.status_code == 201, res.text
        return res.json()

    return _create


@pytest.fixture()
def client_record(new_client):
    return new_client()


@pytest.fixture()
def new_estimate(client, headers, client_record):
    def _create(**overrides) -> dict:
        payload = {
            "clientId": client_record["id"],
            "subtotal": 1000,
            "tax": 80,
            "total": 1080,
            "items": [
                {"description": "Composite decking", "quantity": 200, "unitPrice": 4.5},
                {"description": "Railing", "quantity": 1, "unitPrice": 100},
            ],
        }
        payload.update(overrides)
        res = client.post("/api/protected/estimates", json=payload, headers=headers)
        assert res.status_code == 201, res.text
        return res.json()

    return _create


@pytest.fixture()
def new_invoice(client, headers, client_record):
    def _create(**overrides) -> dict:
        payload = {"clientId": client_record["id"], "subtotal": 1000, "total": 1000}
        payload.update(overrides)
        res = client.post("/api/protected/invoices", json=payload, headers=headers)
        assert res.status_code == 201, res.text
        return res.json()

    return _create


# ── AI ───────────────────────────────────────────────────────────────────


class FakeAI:
    """Canned chat_completion replacement; records every prompt it receives"""

    def __init__(self):
        self.reply = "Generated text"
        self.calls = []
        self.error = None

    async def __call__(self, messages, max_tokens=800, temperature=0.7, json_response=False):
        self.calls.append({"messages": messages, "json_response": json_response})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture()
def fake_ai(monkeypatch):
    fake = FakeAI()
    monkeypatch.setattr(ai_service, "chat_completion", fake)
    return fake
