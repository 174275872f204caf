"""
Session Router

Sign-out for the cart panel. Sessions themselves are issued by the
storefront's sign-in flow through `create_web_session`.
"""
from fastapi import APIRouter, Depends, Response

from pickngo.auth.session import revoke_web_session
from pickngo.logging import get_logger, sanitize_string_for_logging
from .deps import get_session, release_cart_view

logger = get_logger(__name__)

router = APIRouter(tags=["webapp-session"])


@router.post("/session/sign-out", status_code=204)
async def sign_out(session=Depends(get_session)):
    """Revoke the bearer token and drop its cart panel."""
    token, user = session
    revoke_web_session(token)
    release_cart_view(token)
    logger.info("Signed out %s", sanitize_string_for_logging(user.name))
    return Response(status_code=204)
