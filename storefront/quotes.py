# storefront/quotes.py
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session

from .checkout import normalize_cart
from .errors import QuoteError
from .models import Product
from .pricing import calc_line_amounts, to_money


@dataclass(frozen=True)
class ProductQuote:
    id: int
    name: str
    unit_price: Decimal
    qty: int
    rate: Decimal
    net_unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class CartQuote:
    items: List[ProductQuote]
    total: Decimal


def quote_product(db: Session, product_id: int, qty: int) -> Optional[ProductQuote]:
    product = db.get(Product, product_id)
    if product is None:
        return None

    amounts = calc_line_amounts(product.unit_price, qty)
    return ProductQuote(
        id=product.product_id,
        name=product.product_name,
        unit_price=to_money(product.unit_price),
        qty=qty,
        rate=amounts.discount_rate,
        net_unit_price=to_money(amounts.net_amount / qty),
        line_total=amounts.net_amount,
    )


def quote_cart(db: Session, items) -> CartQuote:
    # bad lines and unknown products are left out of the quote, not errors
    if not items:
        raise QuoteError("items empty")

    quotes = [quote_product(db, line.product_id, line.quantity) for line in normalize_cart(items)]
    quotes = [q for q in quotes if q is not None]
    return CartQuote(items=quotes, total=sum((q.line_total for q in quotes), Decimal("0.00")))
