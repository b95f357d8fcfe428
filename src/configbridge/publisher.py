"""Write a JSON config file into the repository — direct commit or branch + PR."""

from __future__ import annotations

import base64
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Literal, Optional, Union

from configbridge.config import (
    BRANCH_PREFIX,
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_CONFIG_PATH,
)
from configbridge.errors import ValidationError
from configbridge.github.client import FileFound, GitHubClient

logger = logging.getLogger(__name__)

DIRECT_COMMIT = "direct-commit"
BRANCH_PR = "branch-pr"


@dataclass
class SaveConfigRequest:
    json: Union[dict, list]
    path: str = DEFAULT_CONFIG_PATH
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    prefer_pr_when_protected: bool = True

    @classmethod
    def from_body(cls, body: Any) -> "SaveConfigRequest":
        """Validate a ``/save-config`` JSON body (camelCase keys)."""
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")

        payload = body.get("json")
        if not isinstance(payload, (dict, list)):
            raise ValidationError("Missing or invalid json")

        path = body.get("path")
        if path is None:
            path = DEFAULT_CONFIG_PATH
        elif not isinstance(path, str) or not path.strip("/ "):
            raise ValidationError("path must be a non-empty string")

        message = body.get("commitMessage")
        if message is None:
            message = DEFAULT_COMMIT_MESSAGE
        elif not isinstance(message, str) or not message.strip():
            raise ValidationError("commitMessage must be a non-empty string")

        prefer_pr = body.get("preferPRWhenProtected")
        if prefer_pr is None:
            prefer_pr = True
        elif not isinstance(prefer_pr, bool):
            raise ValidationError("preferPRWhenProtected must be a boolean")

        return cls(
            json=payload,
            path=path,
            commit_message=message,
            prefer_pr_when_protected=prefer_pr,
        )


@dataclass
class PublishResult:
    method: Literal["direct-commit", "branch-pr"]
    branch: str
    pr_url: Optional[str] = None

    def to_payload(self) -> dict:
        payload: dict[str, Any] = {"ok": True, "method": self.method, "branch": self.branch}
        if self.method == BRANCH_PR:
            payload["prUrl"] = self.pr_url
        return payload


def encode_content(data: Union[dict, list]) -> str:
    """Pretty-print ``data`` as 2-space indented JSON and base64 it for the contents API.

    Integral floats are written without a fraction (``1.0`` becomes ``1``),
    the way the admin app's own JSON serializer prints numbers.
    """
    text = json.dumps(_integral_floats_as_ints(data), indent=2, ensure_ascii=False, allow_nan=False)
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _integral_floats_as_ints(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    if isinstance(value, dict):
        return {k: _integral_floats_as_ints(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_integral_floats_as_ints(v) for v in value]
    return value


def branch_name(millis: int | None = None) -> str:
    if millis is None:
        millis = _now_millis()
    return f"{BRANCH_PREFIX}{millis}"


def _now_millis() -> int:
    return int(time.time() * 1000)


class ConfigPublisher:
    """Publishes config files to ``client``'s repository.

    ``Start → CheckProtection → DirectWrite``, or
    ``Start → CheckProtection → CreateBranch → WriteOnBranch → OpenPR``.
    Any failure propagates; a branch created before a later step fails is
    left in place.
    """

    def __init__(self, client: GitHubClient, default_branch: str) -> None:
        self.client = client
        self.default_branch = default_branch

    async def publish(self, req: SaveConfigRequest) -> PublishResult:
        content = encode_content(req.json)
        protected = await self.client.is_branch_protected(self.default_branch)

        if not protected or not req.prefer_pr_when_protected:
            logger.info(
                "Committing %s directly to %s (protected=%s)",
                req.path, self.default_branch, protected,
            )
            await self.upsert_file(req.path, content, req.commit_message, self.default_branch)
            return PublishResult(method=DIRECT_COMMIT, branch=self.default_branch)

        new_branch = branch_name()
        logger.info("%s is protected, publishing %s via %s", self.default_branch, req.path, new_branch)

        base_sha = await self.client.get_branch_sha(self.default_branch)
        await self.client.create_branch(new_branch, base_sha)
        await self.upsert_file(req.path, content, req.commit_message, new_branch)
        pr = await self.client.create_pull_request(
            title=req.commit_message,
            head=new_branch,
            base=self.default_branch,
            body=f"Config updated by Admin app. Branch: {new_branch}",
        )
        return PublishResult(method=BRANCH_PR, branch=new_branch, pr_url=pr["html_url"])

    async def upsert_file(self, path: str, content_b64: str, message: str, branch: str) -> dict:
        """Update ``path`` on ``branch`` if it exists there, otherwise create it."""
        existing = await self.client.get_file(path, ref=branch)
        sha = existing.sha if isinstance(existing, FileFound) else None
        return await self.client.put_file(path, content_b64, message, branch, sha=sha)
