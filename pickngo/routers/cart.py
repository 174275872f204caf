"""
Cart Panel Router

Exposes one CartView per web session. Every response carries the rendered
panel and the alerts raised while handling the request.
"""
from fastapi import APIRouter, Depends, HTTPException

from pickngo.errors import ERROR_CART_ITEM_NOT_FOUND
from pickngo.logging import get_logger
from .deps import AlertInbox, get_cart_view, get_session
from .models import CartPanelResponse, CheckoutResponse

logger = get_logger(__name__)

router = APIRouter(tags=["cart-panel"])


async def _session_panel(session=Depends(get_session)):
    token, user = session
    return await get_cart_view(token, user)


async def _panel(panel=Depends(_session_panel)):
    """Session panel, loaded once before its first action."""
    view, _ = panel
    if not view.has_loaded:
        await view.load()
    return panel


def _panel_response(view, inbox: AlertInbox) -> dict:
    return {**view.render(), "messages": inbox.drain()}


def _require_item(view, item_id: str):
    item = view.find_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=ERROR_CART_ITEM_NOT_FOUND)
    return item


@router.get("/cart", response_model=CartPanelResponse)
async def get_cart_panel(panel=Depends(_session_panel)):
    """Reload the user's cart and render the panel."""
    view, inbox = panel
    await view.load()
    return _panel_response(view, inbox)


@router.post("/cart/items/{item_id}/toggle", response_model=CartPanelResponse)
async def toggle_cart_item(item_id: str, panel=Depends(_panel)):
    """Check or uncheck one cart row."""
    view, inbox = panel
    item = _require_item(view, item_id)
    view.toggle_selection(item.id)
    return _panel_response(view, inbox)


@router.post("/cart/select-all", response_model=CartPanelResponse)
async def select_all_cart_items(panel=Depends(_panel)):
    """Select every row, or clear the selection if all rows are selected."""
    view, inbox = panel
    view.select_all()
    return _panel_response(view, inbox)


@router.delete("/cart/items/{item_id}", response_model=CartPanelResponse)
async def remove_cart_item(item_id: str, panel=Depends(_panel)):
    """Remove one row from the cart."""
    view, inbox = panel
    item = _require_item(view, item_id)
    if not await view.remove_item(item):
        logger.warning("Cart item %s could not be removed", item.id)
    return _panel_response(view, inbox)


@router.post("/cart/checkout", response_model=CheckoutResponse)
async def checkout_cart(panel=Depends(_panel)):
    """Turn the selected rows into transactions and clear them from the cart."""
    view, inbox = panel
    result = await view.checkout()
    return {"result": result.to_dict(), "cart": _panel_response(view, inbox)}
