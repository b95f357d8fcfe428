"""Config publishing route: /save-config."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from configbridge.errors import BridgeError, InternalError
from configbridge.github.client import GitHubClient
from configbridge.publisher import ConfigPublisher, SaveConfigRequest
from configbridge.server.app import get_github_client, read_json_body

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Config"])


@router.post("/save-config")
async def save_config(request: Request, github: GitHubClient = Depends(get_github_client)):
    """Write the posted JSON into the configured repository.

    Commits straight to the default branch unless it is protected, in which
    case a branch and pull request are created (unless
    ``preferPRWhenProtected`` is false).
    """
    body = await read_json_body(request)
    save_req = SaveConfigRequest.from_body(body)
    publisher = ConfigPublisher(github, request.app.state.config.default_branch)

    try:
        result = await publisher.publish(save_req)
    except BridgeError as e:
        logger.error("Save config error: %s", e)
        raise
    except Exception as e:
        logger.error("Save config error: %s", e)
        raise InternalError(str(e) or type(e).__name__) from e

    return JSONResponse(content=result.to_payload())
