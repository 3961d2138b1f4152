# storefront/sequencer.py
from sqlalchemy import delete, insert
from sqlalchemy.engine import Engine
import logging

from .errors import SequencerExhaustedError
from .models import OrderIdSequence

logger = logging.getLogger(__name__)

# order ids are stored as INT
MAX_ORDER_ID = 2**31 - 1


class OrderSequencer:
    """Hands out unique, increasing order ids.

    Each id is drawn in its own short transaction, so it stays spent even
    when the checkout that asked for it rolls back. Ids may have gaps but are
    never issued twice.

    Only the newest row of ``order_id_seq`` is kept. Older rows are deleted
    on every draw; the autoincrement counter (sqlite_sequence, InnoDB's
    counter) never goes below the row that remains.
    """

    def __init__(self, bind: Engine, max_id: int = MAX_ORDER_ID):
        self.bind = bind
        self.max_id = max_id

    def next_order_id(self) -> int:
        table = OrderIdSequence.__table__
        with self.bind.begin() as con:
            pk = con.execute(insert(table)).inserted_primary_key
            order_id = pk[0] if pk else None
            if order_id:
                con.execute(delete(table).where(table.c.order_id < order_id))

        if not order_id:
            raise SequencerExhaustedError()
        if order_id > self.max_id:
            logger.error("order id sequence exhausted at %s (max %s)", order_id, self.max_id)
            raise SequencerExhaustedError(f"OrderIdSeq exhausted: {order_id} > {self.max_id}")
        return order_id
