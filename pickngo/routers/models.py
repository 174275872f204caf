"""
Cart Panel API Pydantic Models
"""
from typing import Optional, Union

from pydantic import BaseModel


class CartItemView(BaseModel):
    id: Union[int, str]
    product_name: str
    price: float
    quantity: int
    branch_name: str = ""
    line_total: float
    price_display: str
    line_total_display: str
    selected: bool = False


class CartPanelResponse(BaseModel):
    user_name: str
    is_empty: bool
    empty_message: Optional[str] = None
    select_all: bool
    items: list[CartItemView]
    total_price: float
    total_display: str
    currency: str
    last_error: Optional[str] = None
    messages: list[str] = []


class TransactionView(BaseModel):
    product_name: str
    quantity: int
    total: float
    customer_name: str
    date: str
    branch_name: str


class CheckoutResultView(BaseModel):
    status: str
    message: str
    created: list[TransactionView]
    deleted_ids: list[Union[int, str]]
    failed_ids: list[Union[int, str]]


class CheckoutResponse(BaseModel):
    result: CheckoutResultView
    cart: CartPanelResponse
