"""Web session utilities (in-memory)."""
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
from typing import Any, Dict, Mapping, Optional

from pickngo.errors import NoSessionError

SESSION_TTL = timedelta(days=7)

_web_sessions: Dict[str, dict] = {}


@dataclass(frozen=True)
class SessionUser:
    """Identity of the signed-in user. `name` is what cart rows are keyed by."""
    name: str
    email: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "SessionUser":
        """Build from stored session data, raising NoSessionError if it has no name."""
        if not data:
            raise NoSessionError()
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise NoSessionError("Session has no user name")
        return cls(name=name, email=data.get("email"))


def require_session_user(session: Any) -> SessionUser:
    """Accept a SessionUser or a session mapping; raise NoSessionError otherwise."""
    if isinstance(session, SessionUser):
        if not session.name.strip():
            raise NoSessionError("Session has no user name")
        return session
    if session is None or isinstance(session, Mapping):
        return SessionUser.from_mapping(session)
    raise NoSessionError(f"Unsupported session object: {type(session).__name__}")


def create_web_session(name: str, email: Optional[str] = None) -> str:
    """Create a new web session and return the token."""
    session_token = secrets.token_urlsafe(32)
    now = datetime.now(timezone.utc)
    _web_sessions[session_token] = {
        "name": name,
        "email": email,
        "created_at": now.isoformat(),
        "expires_at": (now + SESSION_TTL).isoformat(),
    }
    return session_token


def verify_web_session_token(token: str) -> Optional[dict]:
    """Verify a web session token and return session data."""
    session = _web_sessions.get(token)
    if not session:
        return None

    expires_at = datetime.fromisoformat(session["expires_at"])
    if datetime.now(timezone.utc) > expires_at:
        del _web_sessions[token]
        return None

    return session


def revoke_web_session(token: str) -> None:
    _web_sessions.pop(token, None)
