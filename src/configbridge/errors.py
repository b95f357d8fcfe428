"""Error taxonomy shared by the OAuth exchange, GitHub client and routes."""

from __future__ import annotations

from typing import Any


class ConfigError(Exception):
    """Raised when the environment does not describe a usable configuration."""


class BridgeError(Exception):
    """Base class for errors that are serialized back to the caller as JSON."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"ok": False, "error": self.message}


class ValidationError(BridgeError):
    """Malformed or missing request input."""

    status_code = 400


class AuthenticationError(BridgeError):
    """No access token in the session."""

    status_code = 401


class UpstreamAuthError(BridgeError):
    """GitHub's OAuth endpoint rejected the authorization code."""

    status_code = 400


class UpstreamAPIError(BridgeError):
    """A GitHub REST call failed with something other than the expected 404."""

    status_code = 500

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.upstream_status is not None:
            payload["status"] = self.upstream_status
        return payload


class ProtectionCheckDeniedError(UpstreamAPIError):
    """The token may not read branch protection settings (GitHub answered 403)."""


class PayloadTooLargeError(BridgeError):
    """Request body larger than the configured limit."""

    status_code = 413


class InternalError(BridgeError):
    """Anything else: network failures, malformed upstream responses."""

    status_code = 500
