from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from enum import Enum
from typing import Optional, List
from datetime import datetime


class StockStatus(str, Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class StockOperation(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    SET = "set"


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    default_price: Decimal = Field(..., ge=0)
    default_tax_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    stock_quantity: int = Field(0, ge=0)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Product name is required')
        return v


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    default_price: Optional[Decimal] = Field(None, ge=0)
    default_tax_rate: Optional[Decimal] = Field(None, ge=0, le=100)
    stock_quantity: Optional[int] = Field(None, ge=0)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('Product name cannot be empty')
        return v


class StockUpdate(BaseModel):
    quantity: int = Field(..., ge=0)
    operation: StockOperation


class ProductOut(BaseModel):
    id: int
    name: str
    default_price: Decimal
    default_tax_rate: Decimal
    stock_quantity: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProductList(BaseModel):
    products: List[ProductOut]
    count: int
    limit: int
    offset: int
