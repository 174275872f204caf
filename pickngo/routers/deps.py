"""
Shared Dependencies for Routers

Lazy-loaded singletons and the per-session CartView registry.
"""

from typing import Dict, Optional, TYPE_CHECKING

from fastapi import Header, HTTPException

from pickngo.auth.session import SessionUser, verify_web_session_token
from pickngo.config import get_settings
from pickngo.errors import ERROR_UNAUTHORIZED, NoSessionError

if TYPE_CHECKING:
    from pickngo.cart import CartView
    from pickngo.services.strapi import ContentApiClient


class AlertInbox:
    """Collects panel alerts until the router returns them to the client."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)

    def drain(self) -> list[str]:
        messages, self.messages = self.messages, []
        return messages


# ==================== LAZY SINGLETONS ====================

_content_api: Optional["ContentApiClient"] = None
_views: Dict[str, tuple["CartView", AlertInbox]] = {}


def get_content_api() -> "ContentApiClient":
    """Get or create ContentApiClient singleton (lazy loaded)"""
    global _content_api
    if _content_api is None:
        from pickngo.services.strapi import ContentApiClient
        _content_api = ContentApiClient(get_settings())
    return _content_api


def set_content_api(client: Optional["ContentApiClient"]) -> None:
    """Replace the shared client (application startup, tests)."""
    global _content_api
    _content_api = client
    _views.clear()


async def close_content_api() -> None:
    global _content_api
    if _content_api is not None:
        await _content_api.aclose()
    _content_api = None
    _views.clear()


# ==================== SESSION ====================

def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def get_session(authorization: Optional[str] = Header(None)) -> tuple[str, SessionUser]:
    """Resolve the bearer token to (token, SessionUser) or reject with 401."""
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail=ERROR_UNAUTHORIZED)
    try:
        user = SessionUser.from_mapping(verify_web_session_token(token))
    except NoSessionError as e:
        # Expired or revoked: the panel kept for this token is no longer reachable
        release_cart_view(token)
        raise HTTPException(status_code=401, detail=str(e))
    return token, user


async def get_cart_view(token: str, user: SessionUser) -> tuple["CartView", AlertInbox]:
    """Get the session's CartView, creating it on first use."""
    entry = _views.get(token)
    if entry is not None:
        return entry

    from pickngo.cart import CartView
    from pickngo.services.strapi import CartResource, TransactionResource

    api = get_content_api()
    inbox = AlertInbox()
    view = CartView(
        user,
        carts=CartResource(api),
        transactions=TransactionResource(api),
        notifier=inbox,
        currency=api.settings.currency,
        limit=api.settings.cart_limit,
    )
    _views[token] = (view, inbox)
    return view, inbox


def release_cart_view(token: str) -> None:
    """Forget the CartView kept for a session token."""
    _views.pop(token, None)
