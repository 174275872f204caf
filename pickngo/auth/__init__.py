"""Session identity for the cart panel."""
from .session import (
    SessionUser,
    create_web_session,
    require_session_user,
    revoke_web_session,
    verify_web_session_token,
)

__all__ = [
    "SessionUser",
    "create_web_session",
    "require_session_user",
    "revoke_web_session",
    "verify_web_session_token",
]
