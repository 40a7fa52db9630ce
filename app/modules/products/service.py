import logging
from typing import Optional
from fastapi import HTTPException, status
from sqlalchemy import update, case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.modules.products.models import Product
from app.modules.products.schemas import (
    ProductCreate, ProductUpdate, ProductList, ProductOut,
    StockStatus, StockOperation, StockUpdate
)

logger = logging.getLogger(__name__)


def _ensure_unique_name(db: Session, name: str, exclude_id: Optional[int] = None):
    query = db.query(Product).filter(Product.name == name)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Product with name {name} already exists"
        )


def get_products(
    db: Session,
    search: Optional[str] = None,
    stock_status: Optional[StockStatus] = None,
    limit: int = settings.DEFAULT_PAGE_SIZE,
    offset: int = 0
) -> ProductList:
    """List products ordered by name, filtered by name and stock level."""
    query = db.query(Product)

    if search:
        query = query.filter(Product.name.ilike(f"%{search}%"))

    if stock_status == StockStatus.IN_STOCK:
        query = query.filter(Product.stock_quantity > 0)
    elif stock_status == StockStatus.LOW_STOCK:
        query = query.filter(
            Product.stock_quantity > 0,
            Product.stock_quantity < settings.LOW_STOCK_THRESHOLD
        )
    elif stock_status == StockStatus.OUT_OF_STOCK:
        query = query.filter(Product.stock_quantity == 0)

    products = query.order_by(Product.name).offset(offset).limit(limit).all()
    return ProductList(
        products=[ProductOut.model_validate(p) for p in products],
        count=len(products),
        limit=limit,
        offset=offset
    )


def get_product_by_id(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )
    return product


def create_product(db: Session, data: ProductCreate) -> Product:
    """Create a product; the tax rate falls back to the configured default."""
    _ensure_unique_name(db, data.name)

    product = Product(
        name=data.name,
        default_price=data.default_price,
        default_tax_rate=data.default_tax_rate if data.default_tax_rate is not None else settings.DEFAULT_TAX_RATE,
        stock_quantity=data.stock_quantity
    )
    db.add(product)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Product with this name already exists"
        )
    db.refresh(product)
    logger.info(f"Product {product.id} created: {product.name} (stock={product.stock_quantity})")
    return product


def update_product(db: Session, product_id: int, data: ProductUpdate) -> Product:
    """Update a product; omitted fields keep their current value."""
    product = get_product_by_id(db, product_id)

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in update_data and update_data["name"] != product.name:
        _ensure_unique_name(db, update_data["name"], exclude_id=product_id)

    for field, value in update_data.items():
        setattr(product, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Product with this name already exists"
        )
    db.refresh(product)
    return product


def update_stock(db: Session, product_id: int, data: StockUpdate) -> Product:
    """
    Manual stock operation applied as a single UPDATE statement.

    remove never goes below zero; set replaces the quantity.
    """
    if data.operation == StockOperation.ADD:
        new_quantity = Product.stock_quantity + data.quantity
    elif data.operation == StockOperation.REMOVE:
        new_quantity = case(
            (Product.stock_quantity - data.quantity < 0, 0),
            else_=Product.stock_quantity - data.quantity
        )
    else:
        new_quantity = data.quantity

    result = db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock_quantity=new_quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )
    db.commit()

    product = get_product_by_id(db, product_id)
    db.refresh(product)
    logger.info(f"Stock {data.operation.value} {data.quantity} on product {product_id} -> {product.stock_quantity}")
    return product


def delete_product(db: Session, product_id: int) -> dict:
    """Delete a product. Historical invoice items keep their denormalized name."""
    product = get_product_by_id(db, product_id)
    db.delete(product)
    db.commit()
    logger.info(f"Product {product_id} deleted")
    return {"success": True, "message": "Product deleted successfully"}
