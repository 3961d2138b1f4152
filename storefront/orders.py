# storefront/orders.py
"""Read side of committed orders. Nothing here writes."""
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session

from .errors import OrderNotFoundError
from .models import OrderLine, Product
from .pricing import split_line, to_money


@dataclass(frozen=True)
class OrderLineView:
    order_id: int
    line_no: int
    product_id: int
    name: str
    unit_price: Decimal
    qty: int
    rate: Decimal
    discount_amount: Decimal
    line_total: Decimal
    image_url: Optional[str] = None


@dataclass(frozen=True)
class OrderSummary:
    order_id: int
    subtotal: Decimal
    discount_total: Decimal
    grand_total: Decimal


@dataclass(frozen=True)
class DiscountedPreview:
    items: List[OrderLineView]
    summary: OrderSummary


def get_order_lines(db: Session, order_id: int) -> List[OrderLineView]:
    """Lines of an order joined with their products, in line order.

    Money is derived from the stored price snapshot and rate. An unknown
    order gives an empty list; callers decide whether that is a 404.
    """
    rows = (
        db.query(OrderLine, Product.product_name, Product.image_url)
        .join(Product, Product.product_id == OrderLine.product_id)
        .filter(OrderLine.order_id == order_id)
        .order_by(OrderLine.line_no)
        .all()
    )

    views = []
    for line, name, image_url in rows:
        _, discount_amount, net = split_line(line.unit_price, line.quantity, line.discount)
        views.append(OrderLineView(
            order_id=line.order_id,
            line_no=line.line_no,
            product_id=line.product_id,
            name=name,
            unit_price=Decimal(line.unit_price),
            qty=line.quantity,
            rate=Decimal(line.discount),
            discount_amount=discount_amount,
            line_total=net,
            image_url=image_url,
        ))
    return views


def preview_after_discount(db: Session, order_id: int):
    """Per-line rows plus one summary row for an order.

    Raises ``OrderNotFoundError`` when the order has no lines.
    """
    items = get_order_lines(db, order_id)
    if not items:
        raise OrderNotFoundError(order_id)

    # totals round once over the exact amounts, not over rounded lines
    gross = sum((v.unit_price * v.qty for v in items), Decimal(0))
    discount = sum((v.unit_price * v.qty * v.rate for v in items), Decimal(0))
    summary = OrderSummary(
        order_id=order_id,
        subtotal=to_money(gross),
        discount_total=to_money(discount),
        grand_total=to_money(gross - discount),
    )
    return items, summary


def get_discounted_preview(db: Session, order_id: int) -> DiscountedPreview:
    items, summary = preview_after_discount(db, order_id)
    return DiscountedPreview(items=items, summary=summary)
