# storefront/inventory.py
"""Stock guard.

Stock may never go negative. The check and the decrement are one
conditional UPDATE, so concurrent checkouts cannot both pass a stale read.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
import logging

from .errors import StockGuardError
from .models import Product, StockMovement

logger = logging.getLogger(__name__)

ACTING_USER_KEY = "acting_user_id"
UNKNOWN_USER_ID = 0

# markers a database-side oversell trigger puts in its error message
OVERSELL_MARKERS = ("BlockOversell", "UnitsInStock")


def acting_user_id(db: Session) -> int:
    return db.info.get(ACTING_USER_KEY, UNKNOWN_USER_ID)


def decrement_stock(db: Session, product_id: int, quantity: int, order_id: Optional[int] = None) -> None:
    updated = (
        db.query(Product)
        .filter(Product.product_id == product_id, Product.units_in_stock >= quantity)
        .update(
            {
                Product.units_in_stock: Product.units_in_stock - quantity,
                Product.last_updated: datetime.now(),
            },
            synchronize_session="evaluate",
        )
    )
    if updated != 1:
        raise StockGuardError(
            f"BlockOversell: UnitsInStock would go negative for ProductID={product_id} (requested {quantity})"
        )

    # attribute the movement to whoever is acting in this transaction
    db.add(StockMovement(
        product_id=product_id,
        order_id=order_id,
        change_qty=-quantity,
        user_id=acting_user_id(db),
    ))


def is_oversell(exc: BaseException) -> bool:
    if isinstance(exc, StockGuardError):
        return True
    # DBAPIError keeps the driver's message on .orig
    message = str(getattr(exc, "orig", None) or exc)
    return any(marker in message for marker in OVERSELL_MARKERS)
