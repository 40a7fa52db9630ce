from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload, joinedload, contains_eager
from sqlalchemy import update
from typing import List, Dict, Any, Iterable
import logging

from app.core.config import settings
from app.database.database import transaction
from app.modules.invoices.models import Invoice, InvoiceItem
from app.modules.invoices.schemas import (
    InvoiceCreate, InvoiceUpdate, InvoiceItemCreate, PaymentCreate,
    InvoiceFilters, InvoiceList, InvoiceOut, PaymentStatus
)
from app.modules.customers.models import Customer
from app.modules.products.models import Product
from app.modules.inventory.service import reserve_stock, release_stock, InsufficientStockError
from app.modules.settings.service import increment_invoice_counter
from app.modules.taxes.calculator import calculate_invoice_totals, calculate_line_total, to_money
from app.modules.taxes.schemas import InvoiceTotals

logger = logging.getLogger(__name__)


def build_invoice_predicates(filters: InvoiceFilters) -> list:
    """
    Traducir los filtros del listado a condiciones SQLAlchemy.

    Los predicados sobre Customer requieren que la consulta haga join con
    la tabla de clientes.
    """
    predicates = []

    if filters.status == PaymentStatus.PAID:
        predicates.append(Invoice.payment_received.is_(True))
    elif filters.status == PaymentStatus.UNPAID:
        predicates.append(Invoice.payment_received.is_(False))

    if filters.customer_name:
        predicates.append(Customer.name.ilike(f"%{filters.customer_name}%"))
    if filters.customer_phone:
        predicates.append(Customer.phone.ilike(f"%{filters.customer_phone}%"))

    if filters.date_from:
        predicates.append(Invoice.invoice_date >= filters.date_from)
    if filters.date_to:
        predicates.append(Invoice.invoice_date <= filters.date_to)

    return predicates


def stock_conflict(error: InsufficientStockError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "message": "Stock insuficiente",
            **error.shortage.model_dump()
        }
    )


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db

    def _ensure_customer(self, customer_id: int):
        exists = self.db.query(Customer.id).filter(Customer.id == customer_id).first()
        if not exists:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="El cliente especificado no existe"
            )

    def _ensure_products(self, items: Iterable[InvoiceItemCreate]):
        product_ids = {item.product_id for item in items if item.product_id is not None}
        if not product_ids:
            return
        found = {
            pid for (pid,) in self.db.query(Product.id).filter(Product.id.in_(product_ids)).all()
        }
        missing = sorted(product_ids - found)
        if missing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"El producto {missing[0]} no existe"
            )

    def _build_items(self, items: List[InvoiceItemCreate]) -> List[InvoiceItem]:
        """Crear las líneas con el total calculado en el servidor, en el orden recibido"""
        return [
            InvoiceItem(
                product_id=item.product_id,
                product_name=item.product_name,
                serial_number=item.serial_number,
                warranty=item.warranty,
                quantity=item.quantity,
                price=to_money(item.price),
                cgst=to_money(item.cgst),
                sgst=to_money(item.sgst),
                igst=to_money(item.igst),
                total=calculate_line_total(item)
            )
            for item in items
        ]

    def _apply_totals(self, invoice: Invoice, totals: InvoiceTotals):
        invoice.subtotal = totals.subtotal
        invoice.tax_amount = totals.tax_amount
        invoice.total_amount = totals.total_amount

    def _get_for_update(self, invoice_id: int) -> Invoice:
        invoice = self.db.query(Invoice).filter(
            Invoice.id == invoice_id
        ).with_for_update().first()

        if not invoice:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Factura no encontrada"
            )
        return invoice

    def preview_totals(self, items: List[InvoiceItemCreate]) -> InvoiceTotals:
        """Calcular totales sin persistir nada"""
        return calculate_invoice_totals(items)

    def create_invoice(self, invoice_data: InvoiceCreate, user_id: int) -> Invoice:
        """
        Crear una factura

        En una sola transacción: inserta la factura y sus líneas, descuenta
        el stock de los productos y avanza el contador de facturas. Si algo
        falla no queda ningún cambio.
        """
        self._ensure_customer(invoice_data.customer_id)
        self._ensure_products(invoice_data.items)

        try:
            with transaction(self.db):
                totals = calculate_invoice_totals(invoice_data.items)

                invoice = Invoice(
                    customer_id=invoice_data.customer_id,
                    invoice_date=invoice_data.invoice_date,
                    payment_terms=invoice_data.payment_terms or settings.DEFAULT_PAYMENT_TERMS,
                    created_by=user_id,
                    items=self._build_items(invoice_data.items)
                )
                self._apply_totals(invoice, totals)
                self.db.add(invoice)
                self.db.flush()

                reserve_stock(self.db, invoice_data.items)
                increment_invoice_counter(self.db)

        except InsufficientStockError as e:
            raise stock_conflict(e)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating invoice: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error creando factura"
            )

        logger.info(
            f"Invoice {invoice.id} created for customer {invoice_data.customer_id} "
            f"by user {user_id}: total={totals.total_amount}"
        )
        return self.get_invoice_by_id(invoice.id)

    def get_invoices(self, filters: InvoiceFilters, limit: int = settings.DEFAULT_PAGE_SIZE, offset: int = 0) -> InvoiceList:
        """Listar facturas, las más recientes primero"""
        query = self.db.query(Invoice).join(
            Customer, Invoice.customer_id == Customer.id
        ).options(
            contains_eager(Invoice.customer)
        ).filter(*build_invoice_predicates(filters))

        total = query.count()
        invoices = query.order_by(Invoice.id.desc()).offset(offset).limit(limit).all()

        return InvoiceList(
            invoices=[InvoiceOut.model_validate(inv) for inv in invoices],
            count=len(invoices),
            total=total,
            limit=limit,
            offset=offset
        )

    def get_invoice_by_id(self, invoice_id: int) -> Invoice:
        """Obtener factura con cliente y líneas"""
        invoice = self.db.query(Invoice).options(
            joinedload(Invoice.customer),
            selectinload(Invoice.items)
        ).filter(Invoice.id == invoice_id).first()

        if not invoice:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Factura no encontrada"
            )

        return invoice

    def update_invoice(self, invoice_id: int, invoice_update: InvoiceUpdate) -> Dict[str, Any]:
        """
        Actualizar una factura no pagada

        Los campos omitidos conservan su valor. Si se envían items, las
        líneas anteriores se reemplazan completas: se devuelve su stock, se
        descuenta el de las nuevas y se recalculan los totales.
        """
        try:
            with transaction(self.db):
                invoice = self._get_for_update(invoice_id)

                if invoice.payment_received:
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail="No se puede editar una factura pagada"
                    )

                if invoice_update.customer_id is not None:
                    self._ensure_customer(invoice_update.customer_id)
                    invoice.customer_id = invoice_update.customer_id
                if invoice_update.invoice_date is not None:
                    invoice.invoice_date = invoice_update.invoice_date
                if invoice_update.payment_terms is not None:
                    invoice.payment_terms = invoice_update.payment_terms

                if invoice_update.items is not None:
                    self._ensure_products(invoice_update.items)

                    release_stock(self.db, list(invoice.items))
                    invoice.items = self._build_items(invoice_update.items)
                    self._apply_totals(invoice, calculate_invoice_totals(invoice_update.items))
                    self.db.flush()

                    reserve_stock(self.db, invoice_update.items)

        except InsufficientStockError as e:
            raise stock_conflict(e)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating invoice {invoice_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error actualizando factura"
            )

        logger.info(f"Invoice {invoice_id} updated")
        return {"success": True, "message": "Factura actualizada exitosamente"}

    def record_payment(self, invoice_id: int, payment_data: PaymentCreate) -> Invoice:
        """
        Registrar el pago de una factura

        La comprobación y la escritura son un único UPDATE condicional, de
        modo que de dos pagos concurrentes solo uno puede aplicarse.
        """
        try:
            with transaction(self.db):
                result = self.db.execute(
                    update(Invoice)
                    .where(Invoice.id == invoice_id, Invoice.payment_received.is_(False))
                    .values(
                        payment_received=True,
                        payment_date=payment_data.payment_date,
                        payment_amount=to_money(payment_data.payment_amount)
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail="Factura no encontrada o ya pagada"
                    )

        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error recording payment for invoice {invoice_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error registrando pago"
            )

        logger.info(f"Payment of {payment_data.payment_amount} recorded for invoice {invoice_id}")
        return self.get_invoice_by_id(invoice_id)

    def delete_invoice(self, invoice_id: int) -> Dict[str, Any]:
        """Eliminar factura devolviendo al inventario el stock de sus líneas"""
        try:
            with transaction(self.db):
                invoice = self._get_for_update(invoice_id)
                release_stock(self.db, list(invoice.items))
                self.db.delete(invoice)

        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting invoice {invoice_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error eliminando factura"
            )

        logger.info(f"Invoice {invoice_id} deleted")
        return {"success": True, "message": "Factura eliminada exitosamente"}
