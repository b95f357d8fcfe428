"""OAuth routes: /auth/exchange, /auth/status, /auth/logout."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from configbridge.auth.oauth import exchange_code
from configbridge.auth.session import BridgeSession, SessionUser, get_session
from configbridge.errors import BridgeError, InternalError, ValidationError
from configbridge.server.app import github_client_for, read_json_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/exchange")
async def auth_exchange(request: Request, session: BridgeSession = Depends(get_session)):
    """Exchange an OAuth code for a token and remember who it belongs to.

    The token is stored before the user lookup; if that lookup fails the
    session keeps the token without a user.
    """
    body = await read_json_body(request)
    code = body.get("code") if isinstance(body, dict) else None
    if not isinstance(code, str) or not code.strip():
        raise ValidationError("Missing code")

    try:
        token = await exchange_code(request.app.state.http, request.app.state.config, code)
        session.set_token(token)

        github = github_client_for(request, token)
        user = await github.get_authenticated_user()
        session.set_user(SessionUser(login=user["login"]))
    except BridgeError as e:
        logger.error("Auth exchange error: %s", e)
        raise
    except Exception as e:
        logger.error("Auth exchange error: %s", e)
        raise InternalError(str(e) or type(e).__name__) from e

    logger.info("Authenticated GitHub user %s", user["login"])
    return JSONResponse(content={"ok": True, "user": {"login": user["login"]}})


@router.get("/status")
async def auth_status(session: BridgeSession = Depends(get_session)):
    """Report whether this browser session holds a token."""
    if not session.is_authenticated:
        return JSONResponse(content={"authenticated": False})
    user = session.get_user()
    return JSONResponse(
        content={
            "authenticated": True,
            "user": {"login": user.login} if user else None,
        }
    )


@router.post("/logout")
async def auth_logout(session: BridgeSession = Depends(get_session)):
    session.clear()
    return JSONResponse(content={"ok": True})
