"""Typed access to the per-browser session — GitHub token + cached identity."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, MutableMapping

from fastapi import Request

_TOKEN_KEY = "token"
_USER_KEY = "user"


@dataclass
class SessionUser:
    """Cached identity of the GitHub user the token belongs to."""

    login: str


class BridgeSession:
    """Wraps the signed-cookie session mapping.

    The user is only reported while a token is present; a stale user entry
    without a token is treated as absent.
    """

    def __init__(self, data: MutableMapping[str, Any]) -> None:
        self._data = data

    # ── token ───────────────────────────────────────────────────────

    def get_token(self) -> str | None:
        token = self._data.get(_TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    def set_token(self, token: str) -> None:
        self._data[_TOKEN_KEY] = token

    @property
    def is_authenticated(self) -> bool:
        return self.get_token() is not None

    # ── user ────────────────────────────────────────────────────────

    def get_user(self) -> SessionUser | None:
        if not self.is_authenticated:
            return None
        raw = self._data.get(_USER_KEY)
        if not isinstance(raw, dict) or not raw.get("login"):
            return None
        return SessionUser(login=str(raw["login"]))

    def set_user(self, user: SessionUser) -> None:
        self._data[_USER_KEY] = asdict(user)

    # ── lifecycle ───────────────────────────────────────────────────

    def clear(self) -> None:
        self._data.clear()


def get_session(request: Request) -> BridgeSession:
    """FastAPI dependency: the current request's session."""
    return BridgeSession(request.session)
