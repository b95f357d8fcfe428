"""Global configuration constants and the runtime config loaded from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from configbridge.errors import ConfigError

logger = logging.getLogger(__name__)

# ── GitHub OAuth ───────────────────────────────────────────────────
GITHUB_ACCESS_TOKEN_URL = "https://github.com/login/oauth/access_token"

# ── GitHub REST API ────────────────────────────────────────────────
GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_HEADERS = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": GITHUB_API_VERSION,
    "User-Agent": "configbridge",
}

# ── Publishing ─────────────────────────────────────────────────────
DEFAULT_CONFIG_PATH = "config.json"
DEFAULT_COMMIT_MESSAGE = "Update config via Admin app"
DEFAULT_BRANCH = "main"
BRANCH_PREFIX = "admin-save-"

# ── Server ─────────────────────────────────────────────────────────
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4000
REQUEST_TIMEOUT = 30  # seconds
MAX_BODY_BYTES = 1024 * 1024  # 1 MiB, same limit as the admin app's form posts

# ── Session ────────────────────────────────────────────────────────
DEFAULT_SESSION_SECRET = "change_this"
SESSION_COOKIE_NAME = "configbridge_session"
SESSION_MAX_AGE = 14 * 24 * 60 * 60  # 14 days


@dataclass(frozen=True)
class BridgeConfig:
    """Everything the server needs, resolved once at startup."""

    repo_owner: str
    repo_name: str
    github_client_id: str = ""
    github_client_secret: str = ""
    session_secret: str = DEFAULT_SESSION_SECRET
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    default_branch: str = DEFAULT_BRANCH
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cookie_secure: bool = False
    session_max_age: int = SESSION_MAX_AGE
    github_api_url: str = GITHUB_API_URL
    github_token_url: str = GITHUB_ACCESS_TOKEN_URL

    @property
    def repository(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"

    @property
    def oauth_configured(self) -> bool:
        return bool(self.github_client_id and self.github_client_secret)


def _parse_bool(value: str, default: bool = False) -> bool:
    value = value.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return default


def _parse_int(name: str, value: str, default: int) -> int:
    value = value.strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def _parse_origins(value: str) -> list[str]:
    origins = [o.strip() for o in value.split(",") if o.strip()]
    return origins or ["*"]


def load_config(env: dict[str, str] | None = None) -> BridgeConfig:
    """Build a :class:`BridgeConfig` from environment variables.

    REPO_OWNER and REPO_NAME are required.  Missing OAuth credentials or the
    default session secret only produce a warning so the server can still
    start for local development.
    """
    env = os.environ if env is None else env

    owner = env.get("REPO_OWNER", "").strip()
    name = env.get("REPO_NAME", "").strip()
    missing = [k for k, v in (("REPO_OWNER", owner), ("REPO_NAME", name)) if not v]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    config = BridgeConfig(
        repo_owner=owner,
        repo_name=name,
        github_client_id=env.get("GITHUB_CLIENT_ID", "").strip(),
        github_client_secret=env.get("GITHUB_CLIENT_SECRET", "").strip(),
        session_secret=env.get("SESSION_SECRET", "").strip() or DEFAULT_SESSION_SECRET,
        allowed_origins=_parse_origins(env.get("ORIGIN", "")),
        default_branch=env.get("DEFAULT_BRANCH", "").strip() or DEFAULT_BRANCH,
        host=env.get("HOST", "").strip() or DEFAULT_HOST,
        port=_parse_int("PORT", env.get("PORT", ""), DEFAULT_PORT),
        cookie_secure=_parse_bool(env.get("COOKIE_SECURE", "")),
        session_max_age=_parse_int("SESSION_MAX_AGE", env.get("SESSION_MAX_AGE", ""), SESSION_MAX_AGE),
        github_api_url=(env.get("GITHUB_API_URL", "").strip() or GITHUB_API_URL).rstrip("/"),
    )

    if not config.oauth_configured:
        logger.warning("Missing GITHUB_CLIENT_ID or GITHUB_CLIENT_SECRET; /auth/exchange will fail")
    if config.session_secret == DEFAULT_SESSION_SECRET:
        logger.warning("SESSION_SECRET is not set; using an insecure default")
    return config
