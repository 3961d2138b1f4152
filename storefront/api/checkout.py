from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session
from typing import Optional

from ..checkout import checkout
from ..database import get_db
from ..errors import OrderNotFoundError
from ..orders import get_order_lines
from ..schemas import CartIn, CheckoutOut, ErrorOut, OrderItemsOut, OrderLineOut

router = APIRouter(prefix="/api/checkout", tags=["checkout"])


@router.post(
    "",
    response_model=CheckoutOut,
    responses={400: {"model": ErrorOut}, 500: {"model": ErrorOut}, 503: {"model": ErrorOut}},
)
def create_order(
    body: CartIn,
    db: Session = Depends(get_db),
    x_user_id: Optional[int] = Header(default=None),
):
    # x_user_id comes from the auth layer in front of this service; 0 when absent
    result = checkout(db, body.items, acting_user_id=x_user_id)
    return CheckoutOut(order_id=result.order_id)


@router.get("/{order_id}", response_model=OrderItemsOut, responses={404: {"model": ErrorOut}})
def read_order(order_id: int, db: Session = Depends(get_db)):
    rows = get_order_lines(db, order_id)
    if not rows:
        raise OrderNotFoundError(order_id)
    return OrderItemsOut(
        order_id=order_id,
        items=[OrderLineOut.model_validate(r) for r in rows],
    )
