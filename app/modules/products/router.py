from fastapi import APIRouter, status, Depends, Query
from typing import Optional
from sqlalchemy.orm import Session
from app.dependencies.dbDependecies import get_db
from app.core.config import settings
from app.modules.auth.dependencies import get_auth_context
from app.modules.auth.schemas import AuthContext
from app.modules.products import service
from app.modules.products.schemas import (
    ProductCreate, ProductUpdate, ProductOut, ProductList, StockStatus, StockUpdate
)

product_router = APIRouter(prefix="/products", tags=["Products"])


@product_router.get("/", response_model=ProductList)
def get_products(
    search: Optional[str] = Query(None, description="Search by product name"),
    stock_status: Optional[StockStatus] = Query(None, description="in_stock, low_stock or out_of_stock"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """List products ordered by name."""
    return service.get_products(db, search, stock_status, limit, offset)


@product_router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Get a single product."""
    return service.get_product_by_id(db, product_id)


@product_router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    data: ProductCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Create a new product."""
    return service.create_product(db, data)


@product_router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    data: ProductUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Update product fields."""
    return service.update_product(db, product_id, data)


@product_router.patch("/{product_id}/stock", response_model=ProductOut)
def update_product_stock(
    product_id: int,
    data: StockUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Add, remove or set stock quantity."""
    return service.update_stock(db, product_id, data)


@product_router.delete("/{product_id}")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """Delete a product."""
    return service.delete_product(db, product_id)
