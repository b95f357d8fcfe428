"""Tests for app wiring: health, CORS and the session cookie."""

from configbridge import __version__
from configbridge.config import SESSION_COOKIE_NAME


def test_health(client):
    """Health reports version and repository without auth."""
    r = client.get("/health")

    assert r.status_code == 200
    assert r.json() == {
        "status": "ok",
        "version": __version__,
        "repository": "octo/admin-config",
        "defaultBranch": "main",
    }


def test_cors_preflight_allows_configured_origin(client):
    """The configured origin passes preflight with credentials."""
    r = client.options(
        "/save-config",
        headers={
            "Origin": "http://admin.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )

    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "http://admin.example.com"
    assert r.headers["access-control-allow-credentials"] == "true"


def test_cors_rejects_other_origins(client):
    """Other origins fail preflight."""
    r = client.options(
        "/save-config",
        headers={"Origin": "http://evil.example.com", "Access-Control-Request-Method": "POST"},
    )

    assert r.status_code == 400
    assert "access-control-allow-origin" not in r.headers


def test_session_cookie_set_after_exchange(client):
    """The exchange sets the session cookie."""
    assert SESSION_COOKIE_NAME not in client.cookies

    client.post("/auth/exchange", json={"code": "abc"})

    assert SESSION_COOKIE_NAME in client.cookies


def test_tampered_cookie_reads_as_unauthenticated(authed_client):
    """A forged session cookie is ignored."""
    assert authed_client.get("/auth/status").json()["authenticated"] is True
    authed_client.cookies.clear()
    authed_client.cookies.set(SESSION_COOKIE_NAME, "forged-value")

    assert authed_client.get("/auth/status").json() == {"authenticated": False}
