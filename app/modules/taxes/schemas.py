from pydantic import BaseModel, Field
from decimal import Decimal


class TaxBreakdown(BaseModel):
    """Desglose de impuestos GST de una factura"""
    cgst: Decimal = Field(Decimal('0.00'), description="Central GST")
    sgst: Decimal = Field(Decimal('0.00'), description="State GST")
    igst: Decimal = Field(Decimal('0.00'), description="Integrated GST")


class InvoiceTotals(BaseModel):
    subtotal: Decimal
    taxes: TaxBreakdown
    tax_amount: Decimal
    total_amount: Decimal
