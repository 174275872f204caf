"""Cart panel view-model bound to the content API."""
import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

from pickngo.auth.session import require_session_user
from pickngo.errors import (
    CartApiError,
    MSG_CART_EMPTY,
    MSG_CHECKOUT_ERROR,
    MSG_CHECKOUT_SUCCESS,
    MSG_ITEM_FAILED,
    MSG_SELECT_ITEMS,
)
from pickngo.logging import get_logger, sanitize_string_for_logging
from pickngo.services.money import format_money, multiply, round_money, to_float
from .models import CartItem, ItemId, TransactionRecord

if TYPE_CHECKING:
    from pickngo.services.strapi import CartResource, TransactionResource

logger = get_logger(__name__)

Notifier = Callable[[str], None]


def _log_alert(message: str) -> None:
    logger.info("Cart alert: %s", message)


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class CheckoutStatus(str, Enum):
    NOTHING_SELECTED = "nothing_selected"
    FAILED = "failed"
    COMPLETED = "completed"


@dataclass
class CheckoutResult:
    """Outcome of one checkout attempt."""
    status: CheckoutStatus
    message: str
    created: list[TransactionRecord] = field(default_factory=list)
    deleted_ids: list[ItemId] = field(default_factory=list)
    failed_ids: list[ItemId] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status is CheckoutStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "created": [record.to_dict() for record in self.created],
            "deleted_ids": list(self.deleted_ids),
            "failed_ids": list(self.failed_ids),
        }


class CartView:
    """
    State and actions of the cart panel for one signed-in user.

    Holds the cart rows in server order plus the set of selected ids. Totals
    and the "select all" flag are derived from that state on every read.

    Checkout is a two-phase pipeline:
    1. Create one transaction per selected row, in cart order. The first
       failure stops the attempt; transactions created before it stay
       committed and no cart rows are deleted.
    2. Delete the purchased rows one by one (a failed delete does not stop the
       others), then reload the cart from the server.
    """

    def __init__(
        self,
        session: Any,
        carts: "CartResource",
        transactions: "TransactionResource",
        notifier: Optional[Notifier] = None,
        today: Callable[[], date] = _utc_today,
        currency: str = "USD",
        limit: Optional[int] = None,
    ):
        # Raises NoSessionError before anything touches the network
        self.user = require_session_user(session)
        self.carts = carts
        self.transactions = transactions
        self.notify = notifier or _log_alert
        self.currency = currency
        self.limit = limit
        self._today = today

        self._items: list[CartItem] = []
        self._selection: set[ItemId] = set()
        self._load_seq = 0
        self.has_loaded = False
        self.last_error: Optional[str] = None
        # Serialises checkout and removal when several requests share one view
        self._lock: Optional[asyncio.Lock] = None

    # ==================== STATE ====================

    @property
    def items(self) -> list[CartItem]:
        return list(self._items)

    @property
    def selection(self) -> frozenset:
        return frozenset(self._selection)

    @property
    def all_ids(self) -> set[ItemId]:
        return {item.id for item in self._items}

    @property
    def is_all_selected(self) -> bool:
        """True iff the cart is non-empty and every row is selected."""
        return bool(self._items) and self._selection == self.all_ids

    @property
    def selected_items(self) -> list[CartItem]:
        """Selected rows in cart order; ids no longer in the cart are ignored."""
        return [item for item in self._items if item.id in self._selection]

    @property
    def total_price(self) -> Decimal:
        total = sum(
            (multiply(item.price, item.quantity) for item in self.selected_items),
            Decimal("0"),
        )
        return round_money(total)

    def find_item(self, item_id: ItemId) -> Optional[CartItem]:
        """Look up a row by id; string ids from URLs match integer ids."""
        key = str(item_id)
        return next((item for item in self._items if str(item.id) == key), None)

    # ==================== ACTIONS ====================

    async def load(self) -> bool:
        """
        Replace the cart with the server's rows for the session user.

        Returns False when the request fails or a newer load was issued while
        this one was in flight; the current state is kept in both cases.
        """
        self._load_seq += 1
        seq = self._load_seq

        try:
            items = await self.carts.list_for_user(self.user.name, self.limit)
        except CartApiError as e:
            if seq == self._load_seq:
                self.last_error = str(e)
            logger.error(
                "Failed to fetch cart items for %s: %s",
                sanitize_string_for_logging(self.user.name),
                e,
            )
            return False

        if seq != self._load_seq:
            logger.debug("Discarding stale cart load #%d (latest is #%d)", seq, self._load_seq)
            return False

        self._items = items
        self.has_loaded = True
        self.last_error = None
        return True

    def toggle_selection(self, item_id: ItemId) -> None:
        if item_id in self._selection:
            self._selection.discard(item_id)
        else:
            self._selection.add(item_id)

    def select_all(self) -> None:
        """Clear the selection if every row is selected, otherwise select every row."""
        all_ids = self.all_ids
        if self._selection == all_ids:
            self._selection = set()
        else:
            self._selection = all_ids

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def remove_item(self, item: CartItem) -> bool:
        """Delete one row on the server, then drop it locally."""
        async with self._get_lock():
            return await self._remove_item(item)

    async def _remove_item(self, item: CartItem) -> bool:
        try:
            await self.carts.delete(item.id)
        except CartApiError as e:
            self.last_error = str(e)
            logger.error("Failed to delete cart item %s: %s", item.id, e)
            return False

        self._forget(item.id)
        return True

    async def checkout(self) -> CheckoutResult:
        """
        Run one checkout attempt. Overlapping calls run one after the other, so
        a second call sees the cart as the first one left it.
        """
        async with self._get_lock():
            return await self._checkout()

    async def _checkout(self) -> CheckoutResult:
        selected = self.selected_items
        if not selected:
            self.notify(MSG_SELECT_ITEMS)
            return CheckoutResult(CheckoutStatus.NOTHING_SELECTED, MSG_SELECT_ITEMS)

        on = self._today()
        created: list[TransactionRecord] = []

        for item in selected:
            record = TransactionRecord.from_cart_item(item, on)
            try:
                await self.transactions.create(record)
            except CartApiError as e:
                message = MSG_CHECKOUT_ERROR if e.is_transport_error else MSG_ITEM_FAILED
                self.last_error = str(e)
                logger.error(
                    "Checkout aborted at cart item %s after %d created transaction(s): %s",
                    item.id,
                    len(created),
                    e,
                )
                self.notify(message)
                return CheckoutResult(CheckoutStatus.FAILED, message, created=created)
            created.append(record)

        deleted, failed = await self.finalize_deletion(selected)
        self.notify(MSG_CHECKOUT_SUCCESS)
        return CheckoutResult(
            CheckoutStatus.COMPLETED,
            MSG_CHECKOUT_SUCCESS,
            created=created,
            deleted_ids=deleted,
            failed_ids=failed,
        )

    async def finalize_deletion(self, items: Iterable[CartItem]) -> tuple[list[ItemId], list[ItemId]]:
        """
        Best-effort delete of purchased rows, followed by a reload.

        Returns (deleted ids, ids whose delete failed).
        """
        deleted: list[ItemId] = []
        failed: list[ItemId] = []

        for item in items:
            try:
                await self.carts.delete(item.id)
            except CartApiError as e:
                logger.error("Failed to delete purchased cart item %s: %s", item.id, e)
                failed.append(item.id)
                continue
            self._forget(item.id)
            deleted.append(item.id)
            logger.info("Cart item %s deleted", item.id)

        await self.load()
        return deleted, failed

    def _forget(self, item_id: ItemId) -> None:
        self._items = [item for item in self._items if item.id != item_id]
        self._selection.discard(item_id)

    # ==================== RENDERING ====================

    def render(self) -> dict[str, Any]:
        """Snapshot of the panel for a front end."""
        total = self.total_price
        return {
            "user_name": self.user.name,
            "is_empty": not self._items,
            "empty_message": MSG_CART_EMPTY if not self._items else None,
            "select_all": self.is_all_selected,
            "items": [
                {
                    "id": item.id,
                    "product_name": item.product_name,
                    "price": to_float(item.price),
                    "quantity": item.quantity,
                    "branch_name": item.branch_name,
                    "line_total": to_float(item.line_total),
                    "price_display": f"{format_money(item.price, self.currency)} x {item.quantity}",
                    "line_total_display": format_money(item.line_total, self.currency),
                    "selected": item.id in self._selection,
                }
                for item in self._items
            ],
            "total_price": to_float(total),
            "total_display": format_money(total, self.currency),
            "currency": self.currency,
            "last_error": self.last_error,
        }
