from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional, List
from datetime import date, datetime
from enum import Enum


class PaymentStatus(str, Enum):
    PAID = "paid"
    UNPAID = "unpaid"


# Invoice Item Schemas
class InvoiceItemCreate(BaseModel):
    product_id: Optional[int] = Field(None, description="Producto del inventario; vacío para líneas libres")
    product_name: str = Field(..., min_length=1, max_length=200)
    serial_number: Optional[str] = Field(None, max_length=100)
    warranty: Optional[str] = Field(None, max_length=100)
    quantity: int = Field(..., gt=0, description="Cantidad debe ser mayor a 0")
    price: Decimal = Field(..., ge=0, description="Precio unitario sin impuestos")
    cgst: Decimal = Field(Decimal('0'), ge=0)
    sgst: Decimal = Field(Decimal('0'), ge=0)
    igst: Decimal = Field(Decimal('0'), ge=0)

    @field_validator('cgst', 'sgst', 'igst', mode='before')
    @classmethod
    def empty_tax_is_zero(cls, v):
        if v is None or v == "":
            return Decimal('0')
        return v


class InvoiceItemOut(BaseModel):
    id: int
    product_id: Optional[int] = None
    product_name: str
    serial_number: Optional[str] = None
    warranty: Optional[str] = None
    quantity: int
    price: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    total: Decimal

    class Config:
        from_attributes = True


# Invoice Schemas
class InvoiceCreate(BaseModel):
    customer_id: int
    invoice_date: date = Field(..., description="Fecha de la factura (YYYY-MM-DD)")
    payment_terms: Optional[str] = Field(None, max_length=100)
    items: List[InvoiceItemCreate] = Field(..., min_length=1, description="Debe incluir al menos un item")


class InvoiceUpdate(BaseModel):
    customer_id: Optional[int] = None
    invoice_date: Optional[date] = None
    payment_terms: Optional[str] = Field(None, max_length=100)
    items: Optional[List[InvoiceItemCreate]] = None

    @field_validator('items')
    @classmethod
    def validate_items(cls, v):
        if v is not None and len(v) == 0:
            raise ValueError('Debe incluir al menos un item en la factura')
        return v


class InvoiceTotalsRequest(BaseModel):
    items: List[InvoiceItemCreate] = Field(default_factory=list)


class PaymentCreate(BaseModel):
    payment_date: date = Field(..., description="Fecha del pago (YYYY-MM-DD)")
    payment_amount: Decimal = Field(..., ge=0, description="Monto recibido")


class InvoiceFilters(BaseModel):
    status: Optional[PaymentStatus] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class InvoiceOut(BaseModel):
    id: int
    customer_id: int
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    customer_gstin: Optional[str] = None
    invoice_date: date
    payment_terms: str
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    payment_received: bool
    payment_date: Optional[date] = None
    payment_amount: Optional[Decimal] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InvoiceDetail(InvoiceOut):
    items: List[InvoiceItemOut] = []


class InvoiceList(BaseModel):
    invoices: List[InvoiceOut]
    count: int
    total: int
    limit: int
    offset: int
