"""Async client for the handful of GitHub REST endpoints the bridge needs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union
from urllib.parse import quote

import httpx

from configbridge.config import GITHUB_API_URL, GITHUB_HEADERS
from configbridge.errors import ProtectionCheckDeniedError, UpstreamAPIError


# ── File lookup result ──────────────────────────────────────────────


@dataclass(frozen=True)
class FileFound:
    sha: str


@dataclass(frozen=True)
class FileNotFound:
    pass


FileLookup = Union[FileFound, FileNotFound]


# ── Client ──────────────────────────────────────────────────────────


class GitHubClient:
    """Talks to one repository on behalf of one user token.

    The underlying ``httpx.AsyncClient`` is shared across requests and owned
    by the app lifespan; this object only adds auth headers and URL building.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token: str,
        owner: str,
        repo: str,
        api_base_url: str = GITHUB_API_URL,
    ) -> None:
        self._http = http
        self._token = token
        self.owner = owner
        self.repo = repo
        self._api_base = api_base_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}", **GITHUB_HEADERS}

    def _repo_url(self, suffix: str) -> str:
        return f"{self._api_base}/repos/{quote(self.owner)}/{quote(self.repo)}{suffix}"

    async def _request(
        self,
        method: str,
        url: str,
        *,
        allow_404: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        resp = await self._http.request(method, url, headers=self._headers(), **kwargs)
        if resp.status_code == 404 and allow_404:
            return resp
        if resp.is_error:
            raise _api_error(resp)
        return resp

    # ── Users ───────────────────────────────────────────────────────

    async def get_authenticated_user(self) -> dict:
        """GET /user"""
        resp = await self._request("GET", f"{self._api_base}/user")
        return resp.json()

    # ── Branches ────────────────────────────────────────────────────

    async def is_branch_protected(self, branch: str) -> bool:
        """GET /repos/{owner}/{repo}/branches/{branch}/protection

        404 means the branch has no protection rules.  403 means the token
        cannot see the settings and is reported as its own error kind.
        """
        url = self._repo_url(f"/branches/{quote(branch, safe='')}/protection")
        resp = await self._http.get(url, headers=self._headers())
        if resp.status_code == 404:
            return False
        if resp.status_code == 403:
            raise ProtectionCheckDeniedError(
                f"Not allowed to read branch protection for {branch}: {_error_message(resp)}",
                upstream_status=403,
            )
        if resp.is_error:
            raise _api_error(resp)
        return True

    async def get_branch_sha(self, branch: str) -> str:
        """GET /repos/{owner}/{repo}/git/ref/heads/{branch} — the commit the branch points at."""
        resp = await self._request("GET", self._repo_url(f"/git/ref/heads/{quote(branch)}"))
        return resp.json()["object"]["sha"]

    async def create_branch(self, branch: str, sha: str) -> dict:
        """POST /repos/{owner}/{repo}/git/refs"""
        resp = await self._request(
            "POST",
            self._repo_url("/git/refs"),
            json={"ref": f"refs/heads/{branch}", "sha": sha},
        )
        return resp.json()

    # ── Contents ────────────────────────────────────────────────────

    async def get_file(self, path: str, ref: str) -> FileLookup:
        """GET /repos/{owner}/{repo}/contents/{path}?ref=..."""
        resp = await self._request(
            "GET",
            self._contents_url(path),
            params={"ref": ref},
            allow_404=True,
        )
        if resp.status_code == 404:
            return FileNotFound()
        data = resp.json()
        if not isinstance(data, dict) or "sha" not in data:
            raise UpstreamAPIError(f"{path} is not a file", upstream_status=resp.status_code)
        return FileFound(sha=data["sha"])

    async def put_file(
        self,
        path: str,
        content_b64: str,
        message: str,
        branch: str,
        sha: str | None = None,
    ) -> dict:
        """PUT /repos/{owner}/{repo}/contents/{path} — create, or update when ``sha`` is given."""
        payload: dict[str, Any] = {
            "message": message,
            "content": content_b64,
            "branch": branch,
        }
        if sha is not None:
            payload["sha"] = sha
        resp = await self._request("PUT", self._contents_url(path), json=payload)
        return resp.json()

    # ── Pull requests ───────────────────────────────────────────────

    async def create_pull_request(self, title: str, head: str, base: str, body: str) -> dict:
        """POST /repos/{owner}/{repo}/pulls"""
        resp = await self._request(
            "POST",
            self._repo_url("/pulls"),
            json={"title": title, "head": head, "base": base, "body": body},
        )
        return resp.json()

    # ── Private helpers ─────────────────────────────────────────────

    def _contents_url(self, path: str) -> str:
        return self._repo_url(f"/contents/{quote(path.lstrip('/'))}")


# ── helpers ─────────────────────────────────────────────────────────


def _error_message(resp: httpx.Response) -> str:
    """GitHub puts a human readable reason in the JSON ``message`` field."""
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return resp.reason_phrase or f"HTTP {resp.status_code}"


def _api_error(resp: httpx.Response) -> UpstreamAPIError:
    return UpstreamAPIError(_error_message(resp), upstream_status=resp.status_code)
