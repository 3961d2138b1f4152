# storefront/checkout.py
"""Checkout: turn a cart into an order in one transaction.

The caller owns the session (one connection per request). ``checkout``
draws an order id, writes one order line per cart line with the current
price and discount, takes the stock, then commits. Any failure rolls the
whole order back and is reported as a ``CheckoutError``.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
import logging

from .errors import (
    CheckoutError,
    CheckoutFailedError,
    EmptyCartError,
    InsufficientStockError,
    ProductNotFoundError,
    QuantityTooLargeError,
)
from .inventory import ACTING_USER_KEY, UNKNOWN_USER_ID, decrement_stock, is_oversell
from .models import OrderLine, Product
from .pricing import calc_line_amounts
from .sequencer import OrderSequencer

logger = logging.getLogger(__name__)

# order_details.quantity is a SMALLINT
MAX_LINE_QUANTITY = 32767


@dataclass(frozen=True)
class CartLine:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class PlacedLine:
    line_no: int
    product_id: int
    unit_price: Decimal
    quantity: int
    discount_rate: Decimal


@dataclass(frozen=True)
class CheckoutResult:
    order_id: int
    lines: List[PlacedLine]


def _as_positive_int(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if number != value and not isinstance(value, str):
        # 2.5 is not a quantity
        return None
    return number if number > 0 else None


def normalize_cart(items: Optional[Iterable]) -> List[CartLine]:
    """Keep cart entries with a positive product id and quantity.

    Accepts ``CartLine`` objects, mappings or attribute objects (pydantic
    models). Anything else is dropped silently.
    """
    lines = []
    for item in items or []:
        if isinstance(item, dict):
            pid, qty = item.get("product_id"), item.get("quantity")
        else:
            pid, qty = getattr(item, "product_id", None), getattr(item, "quantity", None)
        pid, qty = _as_positive_int(pid), _as_positive_int(qty)
        if pid is not None and qty is not None:
            lines.append(CartLine(product_id=pid, quantity=qty))
    return lines


def _place_line(db: Session, order_id: int, line_no: int, line: CartLine) -> PlacedLine:
    # 1) current price (and stock, for the log)
    row = (
        db.query(Product.unit_price, Product.units_in_stock)
        .filter(Product.product_id == line.product_id)
        .first()
    )
    if row is None:
        raise ProductNotFoundError(line.product_id)
    unit_price = Decimal(row.unit_price)

    # 2) order line with the price snapshot and the discount of this quantity
    amounts = calc_line_amounts(unit_price, line.quantity)
    db.add(OrderLine(
        order_id=order_id,
        line_no=line_no,
        product_id=line.product_id,
        unit_price=unit_price,
        quantity=line.quantity,
        discount=amounts.discount_rate,
    ))
    db.flush()

    # 3) take the stock; the guard raises if it would go negative
    logger.debug("order %s: product %s qty %s (stock %s)", order_id, line.product_id, line.quantity, row.units_in_stock)
    decrement_stock(db, line.product_id, line.quantity, order_id=order_id)

    return PlacedLine(
        line_no=line_no,
        product_id=line.product_id,
        unit_price=unit_price,
        quantity=line.quantity,
        discount_rate=amounts.discount_rate,
    )


def _rollback_quietly(db: Session) -> None:
    try:
        db.rollback()
    except Exception:
        # the first error is the one the caller needs
        logger.error("rollback after failed checkout also failed", exc_info=True)


def _translate(exc: Exception) -> CheckoutError:
    if isinstance(exc, CheckoutError):
        return exc
    if is_oversell(exc):
        return InsufficientStockError()
    message = str(getattr(exc, "orig", None) or exc) or "Checkout failed"
    return CheckoutFailedError(message)


def checkout(
    db: Session,
    items,
    acting_user_id: Optional[int] = None,
    sequencer: Optional[OrderSequencer] = None,
) -> CheckoutResult:
    lines = normalize_cart(items)
    if not lines:
        raise EmptyCartError()
    for line in lines:
        if line.quantity > MAX_LINE_QUANTITY:
            raise QuantityTooLargeError(line.product_id, line.quantity, MAX_LINE_QUANTITY)

    if sequencer is None:
        sequencer = OrderSequencer(db.get_bind())

    try:
        # who is acting, for the stock audit written in this transaction
        db.info[ACTING_USER_KEY] = acting_user_id or UNKNOWN_USER_ID

        order_id = sequencer.next_order_id()

        # input order, first failure stops the rest
        placed = [_place_line(db, order_id, n, line) for n, line in enumerate(lines, start=1)]

        db.commit()
    except Exception as exc:
        _rollback_quietly(db)
        error = _translate(exc)
        if isinstance(error, CheckoutFailedError):
            logger.exception("checkout failed")
        else:
            logger.warning("checkout rejected: %s", error)
        if error is exc:
            raise
        raise error from exc
    finally:
        db.info.pop(ACTING_USER_KEY, None)

    logger.info("order %s committed with %d line(s)", order_id, len(placed))
    return CheckoutResult(order_id=order_id, lines=placed)
