"""Shared fixtures: a fake GitHub behind httpx.MockTransport and a TestClient."""

from __future__ import annotations

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from configbridge.config import BridgeConfig
from configbridge.server.app import create_app

REPO_PREFIX = "/repos/octo/admin-config"
PR_URL = "https://github.com/octo/admin-config/pull/7"


class FakeGitHub:
    """Minimal stand-in for github.com + api.github.com.

    Knobs are plain attributes; every request seen is kept in ``requests``.
    """

    def __init__(self) -> None:
        self.token_response: dict = {"access_token": "tok1", "token_type": "bearer"}
        self.token_endpoint_down = False
        self.login = "octocat"
        self.user_status = 200
        self.protection_status = 404
        self.files: dict[tuple[str, str], str] = {}  # (branch, path) -> sha
        self.head_sha = "base-sha-123"
        self.pulls_status = 201
        self.put_status: int | None = None
        self.requests: list[httpx.Request] = []

    # ── inspection ──────────────────────────────────────────────────

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def repo_calls(self, method: str, suffix: str) -> list[httpx.Request]:
        return self.calls(method, REPO_PREFIX + suffix)

    # ── transport ───────────────────────────────────────────────────

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.url.host == "github.com" and path == "/login/oauth/access_token":
            if self.token_endpoint_down:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json=self.token_response)

        if path == "/user":
            if self.user_status != 200:
                return httpx.Response(self.user_status, json={"message": "boom"})
            return httpx.Response(200, json={"login": self.login, "id": 1})

        if not path.startswith(REPO_PREFIX):
            return _not_found()
        rest = path[len(REPO_PREFIX):]

        if rest == "/branches/main/protection":
            if self.protection_status == 200:
                return httpx.Response(200, json={"url": "https://api.github.com" + path})
            if self.protection_status == 404:
                return httpx.Response(404, json={"message": "Branch not protected"})
            return httpx.Response(self.protection_status, json={"message": "protection check failed"})

        if rest.startswith("/contents/"):
            file_path = rest[len("/contents/"):]
            if request.method == "GET":
                sha = self.files.get((request.url.params["ref"], file_path))
                if sha is None:
                    return _not_found()
                return httpx.Response(200, json={"type": "file", "path": file_path, "sha": sha})
            if request.method == "PUT":
                if self.put_status is not None:
                    return httpx.Response(self.put_status, json={"message": f"{file_path} does not match"})
                body = json.loads(request.content)
                return httpx.Response(
                    201 if "sha" not in body else 200,
                    json={"content": {"path": file_path, "sha": "new-sha"}, "commit": {"sha": "c1"}},
                )

        if rest == "/git/ref/heads/main" and request.method == "GET":
            return httpx.Response(200, json={"ref": "refs/heads/main", "object": {"sha": self.head_sha}})

        if rest == "/git/refs" and request.method == "POST":
            return httpx.Response(201, json=json.loads(request.content))

        if rest == "/pulls" and request.method == "POST":
            if self.pulls_status != 201:
                return httpx.Response(self.pulls_status, json={"message": "Validation Failed"})
            return httpx.Response(201, json={"number": 7, "html_url": PR_URL})

        return _not_found()


def _not_found() -> httpx.Response:
    return httpx.Response(404, json={"message": "Not Found"})


@pytest.fixture
def config() -> BridgeConfig:
    return BridgeConfig(
        repo_owner="octo",
        repo_name="admin-config",
        github_client_id="client-id",
        github_client_secret="client-secret",
        session_secret="test-session-secret",
        allowed_origins=["http://admin.example.com"],
    )


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def client(config, github):
    app = create_app(config, transport=httpx.MockTransport(github.handler))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def authed_client(client: TestClient) -> TestClient:
    """A client whose session went through a successful code exchange."""
    r = client.post("/auth/exchange", json={"code": "abc"})
    assert r.status_code == 200, r.text
    return client
