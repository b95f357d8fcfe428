"""GitHub OAuth web flow — trade an authorization code for an access token."""

from __future__ import annotations

import httpx

from configbridge.config import BridgeConfig
from configbridge.errors import InternalError, UpstreamAuthError


async def exchange_code(
    client: httpx.AsyncClient,
    config: BridgeConfig,
    code: str,
) -> str:
    """POST the code with our client credentials and return the access token.

    GitHub reports a bad or expired code as HTTP 200 with an ``error`` field,
    so that case is checked before looking for the token.
    """
    resp = await client.post(
        config.github_token_url,
        json={
            "client_id": config.github_client_id,
            "client_secret": config.github_client_secret,
            "code": code,
        },
        headers={"Accept": "application/json"},
    )
    resp.raise_for_status()
    data = resp.json()

    if data.get("error"):
        raise UpstreamAuthError(data.get("error_description") or data["error"])

    token = data.get("access_token")
    if not token:
        raise InternalError("Token response did not include an access_token")
    return token
