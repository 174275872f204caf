"""Cart line items and transaction records with Decimal-based pricing."""
import datetime
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from pickngo.services.money import to_decimal, multiply, to_float

GUEST_CUSTOMER = "Guest"

ItemId = Union[int, str]


def _parse_price(value: Any) -> Decimal:
    """Strict price parsing: missing, boolean or non-numeric prices are rejected."""
    if value is None or isinstance(value, bool):
        raise ValueError(f"malformed cart row: invalid price {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"malformed cart row: invalid price {value!r}") from e


def _parse_quantity(value: Any) -> int:
    """Whole-number quantities only; 2.9 and True are rejected rather than coerced."""
    if isinstance(value, bool):
        raise ValueError("malformed cart row: quantity must be an integer")
    if isinstance(value, int):
        return value
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"malformed cart row: invalid quantity {value!r}") from e
    if not number.is_finite() or number != number.to_integral_value():
        raise ValueError(f"malformed cart row: invalid quantity {value!r}")
    return int(number)


@dataclass
class CartItem:
    """Single cart row as stored by the content API."""
    id: ItemId
    product_name: str
    price: Decimal
    quantity: int
    user_name: str = ""
    branch_name: str = ""

    def __post_init__(self):
        self.price = to_decimal(self.price)
        if not self.price.is_finite():
            raise ValueError("price must be a finite number")
        if self.price < 0:
            raise ValueError("price must be non-negative")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValueError("quantity must be a positive integer")

    @property
    def line_total(self) -> Decimal:
        """Price for all units, unrounded."""
        return multiply(self.price, self.quantity)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CartItem":
        """
        Create from an API record.

        Accepts flat records and records that keep their fields under
        `attributes`. Raises ValueError for rows missing required fields or
        carrying a price or quantity that is not a valid number.
        """
        if not isinstance(data, dict):
            raise ValueError(f"cart row must be an object, got {type(data).__name__}")

        fields = dict(data.get("attributes") or {})
        fields.update({k: v for k, v in data.items() if k != "attributes"})

        try:
            item_id = fields["id"]
            product_name = fields["product_name"]
            quantity = _parse_quantity(fields["quantity"])
            price = _parse_price(fields["price"])
        except KeyError as e:
            raise ValueError(f"malformed cart row: missing {e}") from e

        if item_id is None:
            raise ValueError("malformed cart row: id is null")

        return cls(
            id=item_id,
            product_name=str(product_name),
            price=price,
            quantity=quantity,
            user_name=fields.get("user_name") or "",
            branch_name=fields.get("branch_name") or "",
        )


@dataclass(frozen=True)
class TransactionRecord:
    """Purchase record created for one cart row at checkout."""
    product_name: str
    quantity: int
    total: Decimal
    customer_name: str
    date: datetime.date
    branch_name: str

    @classmethod
    def from_cart_item(cls, item: CartItem, on: datetime.date) -> "TransactionRecord":
        return cls(
            product_name=item.product_name,
            quantity=item.quantity,
            total=item.line_total,
            customer_name=item.user_name or GUEST_CUSTOMER,
            date=on,
            branch_name=item.branch_name,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_name": self.product_name,
            "quantity": self.quantity,
            "total": to_float(self.total),
            "customer_name": self.customer_name,
            "date": self.date.isoformat(),
            "branch_name": self.branch_name,
        }

    def to_payload(self) -> dict[str, Any]:
        """Request body for the transactions endpoint."""
        return {"data": self.to_dict()}
