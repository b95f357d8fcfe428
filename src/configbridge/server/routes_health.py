"""Health route: /health."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from configbridge import __version__

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(request: Request):
    """Health check endpoint."""
    config = request.app.state.config
    return JSONResponse(
        content={
            "status": "ok",
            "version": __version__,
            "repository": config.repository,
            "defaultBranch": config.default_branch,
        }
    )
