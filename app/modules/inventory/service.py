"""
Stock adjustment driven by invoice line items.

Deltas are computed as a pure step; the guarded decrement and the
unconditional increment are issued as single UPDATE statements so the
check and the write happen atomically inside the caller's transaction.
"""
import logging
from typing import Dict, Iterable, Optional, Protocol

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.modules.products.models import Product
from app.modules.inventory.schemas import StockShortage

logger = logging.getLogger(__name__)


class StockLine(Protocol):
    product_id: Optional[int]
    quantity: int


class InsufficientStockError(Exception):
    """Raised when a guarded decrement cannot be applied."""

    def __init__(self, shortage: StockShortage):
        self.shortage = shortage
        super().__init__(
            f"Insufficient stock for product {shortage.product_id}: "
            f"requested {shortage.requested_quantity}, available {shortage.available_quantity}"
        )


def compute_stock_deltas(items: Iterable[StockLine]) -> Dict[int, int]:
    """
    Sum item quantities per product.

    Items without a product are ignored. Keys come out in ascending product id
    so every transaction touches product rows in the same order.
    """
    deltas: Dict[int, int] = {}
    for item in items:
        if item.product_id is None:
            continue
        deltas[item.product_id] = deltas.get(item.product_id, 0) + int(item.quantity)
    return dict(sorted(deltas.items()))


def apply_decrement(db: Session, product_id: int, quantity: int) -> bool:
    """Decrease stock only if enough is available. Returns whether a row changed."""
    result = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock_quantity >= quantity)
        .values(stock_quantity=Product.stock_quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def apply_increment(db: Session, product_id: int, quantity: int) -> bool:
    """Restore stock unconditionally. A missing product is a no-op."""
    result = db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock_quantity=Product.stock_quantity + quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def reserve_stock(db: Session, items: Iterable[StockLine]) -> Dict[int, int]:
    """
    Decrement stock for every product referenced by items.

    Raises InsufficientStockError on the first failed guard; the caller's
    transaction must then roll back the decrements already issued.
    """
    deltas = compute_stock_deltas(items)
    for product_id, quantity in deltas.items():
        if not apply_decrement(db, product_id, quantity):
            available = db.query(Product.stock_quantity).filter(Product.id == product_id).scalar()
            shortage = StockShortage(
                product_id=product_id,
                requested_quantity=quantity,
                available_quantity=available
            )
            logger.warning(f"Stock reservation failed: {shortage.model_dump()}")
            raise InsufficientStockError(shortage)
        logger.debug(f"Reserved {quantity} units of product {product_id}")
    return deltas


def release_stock(db: Session, items: Iterable[StockLine]) -> Dict[int, int]:
    """Increment stock back for every product referenced by items."""
    deltas = compute_stock_deltas(items)
    for product_id, quantity in deltas.items():
        if not apply_increment(db, product_id, quantity):
            logger.info(f"Product {product_id} no longer exists; skipping stock release of {quantity}")
    return deltas
