from pydantic import BaseModel, ConfigDict
from typing import Any, List, Optional


# input side (what the frontend sends)
class CartItemIn(BaseModel):
    # any value is accepted here: checkout drops lines it cannot use
    product_id: Any = None
    quantity: Any = None


class CartIn(BaseModel):
    items: List[CartItemIn] = []


# output side (money goes out as JSON numbers)
class CheckoutOut(BaseModel):
    order_id: int


class OrderLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: int
    line_no: int
    product_id: int
    name: str
    unit_price: float
    qty: int
    rate: float
    discount_amount: float
    line_total: float
    image_url: Optional[str] = None


class OrderItemsOut(BaseModel):
    order_id: int
    items: List[OrderLineOut]


class OrderSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: int
    subtotal: float
    discount_total: float
    grand_total: float


class OrderPreviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items: List[OrderLineOut]
    summary: OrderSummaryOut


class ProductQuoteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    unit_price: float
    qty: int
    rate: float
    net_unit_price: float
    line_total: float


class CartQuoteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items: List[ProductQuoteOut]
    total: float


class ErrorOut(BaseModel):
    error: str
    detail: str
