"""FastAPI application factory."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import httpx
from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.sessions import SessionMiddleware

from configbridge import __version__
from configbridge.auth.session import BridgeSession, get_session
from configbridge.config import MAX_BODY_BYTES, REQUEST_TIMEOUT, SESSION_COOKIE_NAME, BridgeConfig
from configbridge.errors import AuthenticationError, BridgeError, PayloadTooLargeError, ValidationError
from configbridge.github.client import GitHubClient


# ── Body Size Middleware ────────────────────────────────────────────


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared Content-Length exceeds ``max_bytes``."""

    def __init__(self, app, max_bytes: int = MAX_BODY_BYTES) -> None:
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next) -> Response:
        length = request.headers.get("content-length", "")
        if length.isdigit() and int(length) > self.max_bytes:
            return JSONResponse(
                status_code=413,
                content={
                    "ok": False,
                    "error": f"Request body exceeds {self.max_bytes} bytes",
                },
            )
        return await call_next(request)


# ── Lifespan ────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage the shared httpx client used for GitHub calls."""
    transport: httpx.AsyncBaseTransport | None = app.state.transport
    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, transport=transport) as http:
        app.state.http = http
        yield


# ── App Factory ─────────────────────────────────────────────────────


def create_app(
    config: BridgeConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``transport`` replaces the network transport of the shared HTTP client,
    which is how tests stand in for GitHub.
    """

    app = FastAPI(
        title="configbridge",
        description="GitHub OAuth bridge for publishing admin config files",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.transport = transport

    # Middlewares added last run first: CORS → body size → session.
    app.add_middleware(
        SessionMiddleware,
        secret_key=config.session_secret,
        session_cookie=SESSION_COOKIE_NAME,
        max_age=config.session_max_age,
        same_site="lax",
        https_only=config.cookie_secure,
    )
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=MAX_BODY_BYTES)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BridgeError, bridge_error_handler)

    # Register routes
    from configbridge.server.routes_auth import router as auth_router
    from configbridge.server.routes_config import router as config_router
    from configbridge.server.routes_health import router as health_router

    app.include_router(auth_router)
    app.include_router(config_router)
    app.include_router(health_router)

    return app


async def bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


# ── Request helpers ─────────────────────────────────────────────────


async def read_json_body(request: Request) -> Any:
    """Parse the request body as JSON; an empty body reads as ``{}``.

    The size check repeats here because chunked uploads carry no
    Content-Length for :class:`BodySizeLimitMiddleware` to inspect.
    """
    raw = await request.body()
    if len(raw) > MAX_BODY_BYTES:
        raise PayloadTooLargeError(f"Request body exceeds {MAX_BODY_BYTES} bytes")
    if not raw.strip():
        return {}
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        raise ValidationError("Request body is not valid JSON") from None


def _reject_constant(name: str) -> Any:
    # NaN / Infinity / -Infinity are not JSON
    raise ValidationError(f"Request body is not valid JSON: {name} is not allowed")


def github_client_for(request: Request, token: str) -> GitHubClient:
    config: BridgeConfig = request.app.state.config
    return GitHubClient(
        request.app.state.http,
        token,
        owner=config.repo_owner,
        repo=config.repo_name,
        api_base_url=config.github_api_url,
    )


def get_github_client(
    request: Request,
    session: BridgeSession = Depends(get_session),
) -> GitHubClient:
    """FastAPI dependency: a client authenticated with the session's token."""
    token = session.get_token()
    if token is None:
        raise AuthenticationError("Not authenticated")
    return github_client_for(request, token)
