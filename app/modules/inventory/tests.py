"""
Tests for stock adjustment driven by invoice items.
"""

import pytest
from types import SimpleNamespace

from app.modules.products.models import Product
from app.modules.inventory.service import (
    compute_stock_deltas, reserve_stock, release_stock, InsufficientStockError
)


def line(product_id, quantity):
    return SimpleNamespace(product_id=product_id, quantity=quantity)


@pytest.fixture
def products(db_session):
    keyboard = Product(name="Keyboard", default_price=20, stock_quantity=5)
    monitor = Product(name="Monitor", default_price=150, stock_quantity=1)
    db_session.add_all([keyboard, monitor])
    db_session.commit()
    return keyboard.id, monitor.id


def stock_of(db_session, product_id):
    db_session.expire_all()
    return db_session.query(Product.stock_quantity).filter(Product.id == product_id).scalar()


class TestComputeStockDeltas:

    def test_sums_quantities_per_product(self):
        deltas = compute_stock_deltas([line(2, 1), line(1, 3), line(2, 4)])
        assert deltas == {1: 3, 2: 5}

    def test_ordered_by_product_id(self):
        deltas = compute_stock_deltas([line(9, 1), line(3, 1), line(5, 1)])
        assert list(deltas) == [3, 5, 9]

    def test_ignores_items_without_product(self):
        assert compute_stock_deltas([line(None, 7), line(4, 2)]) == {4: 2}

    def test_empty(self):
        assert compute_stock_deltas([]) == {}


class TestReserveAndRelease:

    def test_reserve_decrements_stock(self, db_session, products):
        keyboard_id, monitor_id = products
        reserve_stock(db_session, [line(keyboard_id, 2), line(monitor_id, 1)])
        db_session.commit()

        assert stock_of(db_session, keyboard_id) == 3
        assert stock_of(db_session, monitor_id) == 0

    def test_reserve_failure_raises_with_shortage(self, db_session, products):
        keyboard_id, monitor_id = products

        with pytest.raises(InsufficientStockError) as exc_info:
            reserve_stock(db_session, [line(keyboard_id, 2), line(monitor_id, 3)])
        db_session.rollback()

        shortage = exc_info.value.shortage
        assert shortage.product_id == monitor_id
        assert shortage.requested_quantity == 3
        assert shortage.available_quantity == 1
        # La reducción ya emitida para el teclado se deshace con el rollback
        assert stock_of(db_session, keyboard_id) == 5
        assert stock_of(db_session, monitor_id) == 1

    def test_reserve_missing_product_has_no_available_quantity(self, db_session, products):
        with pytest.raises(InsufficientStockError) as exc_info:
            reserve_stock(db_session, [line(9999, 1)])
        db_session.rollback()
        assert exc_info.value.shortage.available_quantity is None

    def test_release_restores_stock_and_skips_missing(self, db_session, products):
        keyboard_id, _ = products
        release_stock(db_session, [line(keyboard_id, 4), line(9999, 1)])
        db_session.commit()
        assert stock_of(db_session, keyboard_id) == 9

    def test_reserve_then_release_is_identity(self, db_session, products):
        keyboard_id, monitor_id = products
        items = [line(keyboard_id, 5), line(monitor_id, 1), line(None, 10)]
        reserve_stock(db_session, items)
        release_stock(db_session, items)
        db_session.commit()
        assert stock_of(db_session, keyboard_id) == 5
        assert stock_of(db_session, monitor_id) == 1
