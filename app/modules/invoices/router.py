from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from app.database.database import get_db
from app.core.config import settings
from app.modules.auth.dependencies import get_auth_context
from app.modules.auth.schemas import AuthContext
from app.modules.invoices.service import InvoiceService
from app.modules.invoices.schemas import (
    InvoiceCreate, InvoiceOut, InvoiceDetail, InvoiceList, InvoiceUpdate,
    InvoiceFilters, InvoiceTotalsRequest, PaymentCreate, PaymentStatus
)
from app.modules.taxes.schemas import InvoiceTotals

# Router principal del módulo de facturas
router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.get("/", response_model=InvoiceList)
def list_invoices(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    payment_status: Optional[PaymentStatus] = Query(None, alias="status", description="paid o unpaid"),
    customer_name: Optional[str] = Query(None, description="Buscar por nombre de cliente"),
    customer_phone: Optional[str] = Query(None, description="Buscar por teléfono de cliente"),
    date_from: Optional[date] = Query(None, description="Fecha inicial (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="Fecha final (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """
    Listar facturas con filtros

    Permite filtrar por estado de pago, cliente y rango de fechas.
    """
    service = InvoiceService(db)
    filters = InvoiceFilters(
        status=payment_status,
        customer_name=customer_name,
        customer_phone=customer_phone,
        date_from=date_from,
        date_to=date_to
    )
    return service.get_invoices(filters, limit, offset)


@router.post("/calculate", response_model=InvoiceTotals)
def calculate_totals(
    data: InvoiceTotalsRequest,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """
    Calcular subtotal, desglose GST y total de un borrador sin guardarlo
    """
    return InvoiceService(db).preview_totals(data.items)


@router.get("/{invoice_id}", response_model=InvoiceDetail)
def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """
    Obtener detalles completos de una factura con sus líneas
    """
    return InvoiceService(db).get_invoice_by_id(invoice_id)


@router.post("/", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_data: InvoiceCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """
    Crear una nueva factura

    Se descuenta automáticamente el stock de los productos.
    """
    service = InvoiceService(db)
    return service.create_invoice(invoice_data, auth_context.user_id)


@router.put("/{invoice_id}")
def update_invoice(
    invoice_id: int,
    invoice_update: InvoiceUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """
    Actualizar una factura (solo si no está pagada)
    """
    service = InvoiceService(db)
    return service.update_invoice(invoice_id, invoice_update)


@router.post("/{invoice_id}/payment", response_model=InvoiceOut)
def record_payment(
    invoice_id: int,
    payment_data: PaymentCreate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """
    Registrar el pago de una factura

    Una factura solo puede pagarse una vez.
    """
    service = InvoiceService(db)
    return service.record_payment(invoice_id, payment_data)


@router.delete("/{invoice_id}")
def delete_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(get_auth_context)
):
    """
    Eliminar una factura y devolver su stock al inventario
    """
    service = InvoiceService(db)
    return service.delete_invoice(invoice_id)
