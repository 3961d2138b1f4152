from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import QuoteError, QuoteProductNotFoundError
from ..quotes import quote_cart, quote_product
from ..schemas import CartIn, CartQuoteOut, ErrorOut, ProductQuoteOut

router = APIRouter(prefix="/api", tags=["quotes"])


@router.get(
    "/products/{product_id}/quote",
    response_model=ProductQuoteOut,
    responses={400: {"model": ErrorOut}, 404: {"model": ErrorOut}},
)
def product_quote(product_id: int, qty: int = 1, db: Session = Depends(get_db)):
    if product_id <= 0 or qty <= 0:
        raise QuoteError("bad params")

    quote = quote_product(db, product_id, qty)
    if quote is None:
        raise QuoteProductNotFoundError(product_id)
    return ProductQuoteOut.model_validate(quote)


@router.post("/cart/quote", response_model=CartQuoteOut, responses={400: {"model": ErrorOut}})
def cart_quote(body: CartIn, db: Session = Depends(get_db)):
    return CartQuoteOut.model_validate(quote_cart(db, body.items))
