"""Auth package — GitHub OAuth code exchange + session access."""

from configbridge.auth.oauth import exchange_code
from configbridge.auth.session import BridgeSession, SessionUser, get_session

__all__ = ["BridgeSession", "SessionUser", "exchange_code", "get_session"]
