from decimal import Decimal

import pytest

from storefront.checkout import MAX_LINE_QUANTITY, checkout, normalize_cart, CartLine
from storefront.database import engine
from storefront.errors import (
    CheckoutFailedError,
    EmptyCartError,
    InsufficientStockError,
    ProductNotFoundError,
    QuantityTooLargeError,
    SequencerExhaustedError,
)
from storefront.inventory import ACTING_USER_KEY
from storefront.models import OrderIdSequence, OrderLine, Product, StockMovement
from storefront.orders import get_order_lines
from storefront.sequencer import OrderSequencer


class BrokenSequencer:
    def __init__(self, error):
        self.error = error

    def next_order_id(self):
        raise self.error


def test_example_order(db, add_product, stock_of):
    add_product(7, "10.00", 5)

    result = checkout(db, [{"product_id": 7, "quantity": 3}])

    assert stock_of(7) == 2
    lines = get_order_lines(db, result.order_id)
    assert len(lines) == 1
    assert lines[0].line_total == Decimal("30.00")
    assert lines[0].rate == Decimal("0")


def test_example_order_without_enough_stock(db, add_product, stock_of):
    add_product(7, "10.00", 2)

    with pytest.raises(InsufficientStockError):
        checkout(db, [{"product_id": 7, "quantity": 3}])

    assert stock_of(7) == 2
    assert db.query(OrderLine).count() == 0
    assert db.query(StockMovement).count() == 0


def test_only_ordered_products_lose_stock(db, add_product, stock_of):
    add_product(1, "2.50", 10)
    add_product(2, "4.00", 10)
    add_product(3, "9.99", 10)

    checkout(db, [{"product_id": 1, "quantity": 4}, {"product_id": 3, "quantity": 1}])

    assert (stock_of(1), stock_of(2), stock_of(3)) == (6, 10, 9)


def test_late_failure_rolls_back_earlier_lines(db, add_product, stock_of):
    add_product(1, "2.50", 10)
    add_product(2, "4.00", 1)

    with pytest.raises(InsufficientStockError):
        checkout(db, [{"product_id": 1, "quantity": 2}, {"product_id": 2, "quantity": 5}])

    assert (stock_of(1), stock_of(2)) == (10, 1)
    assert db.query(OrderLine).count() == 0


@pytest.mark.parametrize("items", [[], None, [{"product_id": -1, "quantity": 5}], [{"product_id": 1, "quantity": 0}]])
def test_empty_cart(db, items):
    with pytest.raises(EmptyCartError):
        checkout(db, items)
    # rejected before an order id is drawn
    assert db.query(OrderIdSequence).count() == 0


def test_unknown_product(db, add_product, stock_of):
    add_product(1, "2.50", 10)

    with pytest.raises(ProductNotFoundError) as e:
        checkout(db, [{"product_id": 1, "quantity": 1}, {"product_id": 999, "quantity": 1}])

    assert e.value.product_id == 999
    assert stock_of(1) == 10
    assert db.query(OrderLine).count() == 0


def test_same_product_on_two_lines(db, add_product, stock_of):
    add_product(1, "1.00", 5)

    result = checkout(db, [{"product_id": 1, "quantity": 2}, {"product_id": 1, "quantity": 3}])

    assert stock_of(1) == 0
    assert [(p.line_no, p.quantity) for p in result.lines] == [(1, 2), (2, 3)]


def test_price_is_snapshotted(db, add_product):
    add_product(1, "5.00", 10)
    result = checkout(db, [{"product_id": 1, "quantity": 1}])

    product = db.get(Product, 1)
    product.unit_price = Decimal("99.00")
    db.commit()

    assert get_order_lines(db, result.order_id)[0].unit_price == Decimal("5.00")


def test_bulk_discount_is_stored(db, add_product):
    add_product(1, "2.00", 50)
    result = checkout(db, [{"product_id": 1, "quantity": 10}])
    line = get_order_lines(db, result.order_id)[0]
    assert line.rate == Decimal("0.10")
    assert line.line_total == Decimal("18.00")


def test_acting_user_is_recorded(db, add_product):
    add_product(1, "2.00", 5)
    checkout(db, [{"product_id": 1, "quantity": 1}], acting_user_id=17)
    checkout(db, [{"product_id": 1, "quantity": 1}])

    users = [m.user_id for m in db.query(StockMovement).order_by(StockMovement.id)]
    assert users == [17, 0]
    assert ACTING_USER_KEY not in db.info


def test_failed_checkout_spends_its_order_id(db, add_product):
    add_product(1, "2.00", 1)

    with pytest.raises(InsufficientStockError):
        checkout(db, [{"product_id": 1, "quantity": 2}])
    result = checkout(db, [{"product_id": 1, "quantity": 1}])

    # id 1 went to the failed attempt
    assert result.order_id == 2


def test_sequencer_exhausted_aborts(db, add_product, stock_of):
    add_product(1, "2.00", 5)
    with pytest.raises(SequencerExhaustedError):
        checkout(db, [{"product_id": 1, "quantity": 1}], sequencer=OrderSequencer(engine, max_id=0))
    assert stock_of(1) == 5


def test_unexpected_error_becomes_checkout_failed(db, add_product):
    add_product(1, "2.00", 5)
    with pytest.raises(CheckoutFailedError) as e:
        checkout(db, [{"product_id": 1, "quantity": 1}], sequencer=BrokenSequencer(RuntimeError("connection reset")))
    assert "connection reset" in str(e.value)
    assert e.value.status_code == 500
    assert "connection reset" not in e.value.public_detail


def test_trigger_style_message_becomes_insufficient_stock(db, add_product):
    add_product(1, "2.00", 5)
    error = RuntimeError("The transaction ended in the trigger TRG_Products_BlockOversell")
    with pytest.raises(InsufficientStockError):
        checkout(db, [{"product_id": 1, "quantity": 1}], sequencer=BrokenSequencer(error))


def test_rollback_failure_does_not_hide_the_cause(db, add_product, monkeypatch, caplog):
    add_product(1, "2.00", 5)

    def broken_rollback():
        raise RuntimeError("rollback failed")

    monkeypatch.setattr(db, "rollback", broken_rollback)
    with pytest.raises(ProductNotFoundError):
        checkout(db, [{"product_id": 2, "quantity": 1}])
    assert "rollback after failed checkout also failed" in caplog.text


def test_normalize_cart_drops_bad_lines():
    lines = normalize_cart([
        {"product_id": 1, "quantity": 2},
        {"product_id": "3", "quantity": "4"},
        {"product_id": 0, "quantity": 1},
        {"product_id": 5},
        {"product_id": "abc", "quantity": 1},
        {"product_id": 6, "quantity": 2.5},
        CartLine(product_id=8, quantity=1),
    ])
    assert lines == [CartLine(1, 2), CartLine(3, 4), CartLine(8, 1)]


def test_normalize_cart_rejects_bools_and_infinity():
    lines = normalize_cart([
        {"product_id": True, "quantity": 1},
        {"product_id": 1, "quantity": True},
        {"product_id": 2, "quantity": float("inf")},
        {"product_id": float("nan"), "quantity": 1},
        {"product_id": [1], "quantity": {"n": 1}},
        {"product_id": 4, "quantity": 1},
    ])
    assert lines == [CartLine(4, 1)]


def test_quantity_over_line_limit(db, add_product, stock_of):
    add_product(1, "1.00", 100000)

    with pytest.raises(QuantityTooLargeError) as e:
        checkout(db, [{"product_id": 1, "quantity": 1}, {"product_id": 1, "quantity": MAX_LINE_QUANTITY + 1}])

    assert e.value.status_code == 400
    assert stock_of(1) == 100000
    # rejected before an order id is drawn
    assert db.query(OrderIdSequence).count() == 0


def test_quantity_at_line_limit(db, add_product, stock_of):
    add_product(1, "1.00", MAX_LINE_QUANTITY)
    checkout(db, [{"product_id": 1, "quantity": MAX_LINE_QUANTITY}])
    assert stock_of(1) == 0
