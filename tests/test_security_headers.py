import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from remodra.security_headers import SecurityHeadersMiddleware


@pytest.fixture()
def hardened():
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/api/health"])

    @app.get("/api/health")
    def health():
        return {"status": "healthy"}

    @app.get("/api/protected/clients")
    def clients():
        return []

    @app.get("/api/public/estimates/1")
    def estimate():
        return {"id": 1}

    return TestClient(app)


def test_api_responses_cannot_be_framed(hardened):
    res = hardened.get("/api/protected/clients")
    assert res.headers["X-Frame-Options"] == "DENY"
    assert "frame-ancestors 'none'" in res.headers["Content-Security-Policy"]
    assert res.headers["X-Content-Type-Options"] == "nosniff"
    assert res.headers["Cache-Control"] == "no-store"


def test_public_documents_can_be_framed_by_frontend(hardened):
    res = hardened.get("/api/public/estimates/1")
    assert res.headers["X-Frame-Options"] == "SAMEORIGIN"
    assert "frame-ancestors 'self'" in res.headers["Content-Security-Policy"]


def test_excluded_paths_are_untouched(hardened):
    res = hardened.get("/api/health")
    assert "X-Frame-Options" not in res.headers
