"""
Cálculo de totales de factura

Funciones puras: no acceden a la base de datos y deben invocarse de nuevo
cada vez que cambian los ítems.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Protocol

from app.modules.taxes.schemas import InvoiceTotals, TaxBreakdown

CENT = Decimal('0.01')


class TaxedLine(Protocol):
    quantity: int
    price: Decimal
    cgst: Optional[Decimal]
    sgst: Optional[Decimal]
    igst: Optional[Decimal]


def to_money(value) -> Decimal:
    """Redondear a la precisión de la moneda (2 decimales, redondeo comercial)"""
    if value is None:
        return Decimal('0.00')
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def line_subtotal(item: TaxedLine) -> Decimal:
    return to_money(Decimal(int(item.quantity)) * Decimal(str(item.price)))


def line_tax(item: TaxedLine) -> Decimal:
    return to_money(item.cgst) + to_money(item.sgst) + to_money(item.igst)


def calculate_line_total(item: TaxedLine) -> Decimal:
    """
    Total de una línea: cantidad x precio + CGST + SGST + IGST
    """
    return line_subtotal(item) + line_tax(item)


def calculate_invoice_totals(items: Iterable[TaxedLine]) -> InvoiceTotals:
    """
    Calcular totales de la factura

    Args:
        items: Líneas con quantity, price y componentes cgst/sgst/igst
            opcionales (ausentes cuentan como cero)

    Returns:
        InvoiceTotals con subtotal, desglose GST, tax_amount y
        total_amount = subtotal + tax_amount
    """
    subtotal = Decimal('0.00')
    cgst = Decimal('0.00')
    sgst = Decimal('0.00')
    igst = Decimal('0.00')

    for item in items:
        subtotal += line_subtotal(item)
        cgst += to_money(item.cgst)
        sgst += to_money(item.sgst)
        igst += to_money(item.igst)

    tax_amount = cgst + sgst + igst
    return InvoiceTotals(
        subtotal=subtotal,
        taxes=TaxBreakdown(cgst=cgst, sgst=sgst, igst=igst),
        tax_amount=tax_amount,
        total_amount=subtotal + tax_amount
    )
