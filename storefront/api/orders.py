from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ..database import get_db
from ..orders import get_discounted_preview, get_order_lines
from ..schemas import ErrorOut, OrderLineOut, OrderPreviewOut

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("/{order_id}/items", response_model=List[OrderLineOut])
def order_items(order_id: int, db: Session = Depends(get_db)):
    return [OrderLineOut.model_validate(r) for r in get_order_lines(db, order_id)]


@router.get("/{order_id}/preview", response_model=OrderPreviewOut, responses={404: {"model": ErrorOut}})
def order_preview(order_id: int, db: Session = Depends(get_db)):
    # OrderNotFoundError -> 404 via the app's error handler
    return OrderPreviewOut.model_validate(get_discounted_preview(db, order_id))
