"""
Tests para el cálculo de totales de factura

Cubren:
- Total por línea con componentes CGST/SGST/IGST
- Totales de factura y desglose de impuestos
- Redondeo a dos decimales
- Endpoint de vista previa /invoices/calculate
"""

from decimal import Decimal
from types import SimpleNamespace

from app.modules.invoices.schemas import InvoiceItemCreate
from app.modules.taxes.calculator import (
    calculate_invoice_totals, calculate_line_total, to_money
)


def make_item(quantity, price, cgst=None, sgst=None, igst=None):
    return SimpleNamespace(quantity=quantity, price=price, cgst=cgst, sgst=sgst, igst=igst)


class TestLineTotal:
    """Tests para el total de una línea"""

    def test_line_total_adds_all_tax_components(self):
        item = make_item(2, Decimal("100.00"), Decimal("9.00"), Decimal("9.00"), Decimal("0"))
        assert calculate_line_total(item) == Decimal("218.00")

    def test_missing_tax_components_count_as_zero(self):
        item = make_item(3, Decimal("100"))
        assert calculate_line_total(item) == Decimal("300.00")

    def test_works_with_request_schema(self):
        item = InvoiceItemCreate(product_name="Mouse", quantity=4, price="25.50", igst="18.36")
        assert calculate_line_total(item) == Decimal("120.36")


class TestInvoiceTotals:
    """Tests para los totales de la factura"""

    def test_empty_items_yield_zeros(self):
        totals = calculate_invoice_totals([])
        assert totals.subtotal == Decimal("0.00")
        assert totals.tax_amount == Decimal("0.00")
        assert totals.total_amount == Decimal("0.00")
        assert totals.taxes.cgst == Decimal("0.00")

    def test_breakdown_and_invariant(self):
        items = [
            make_item(2, Decimal("100.00"), Decimal("9.00"), Decimal("9.00")),
            make_item(1, Decimal("50.00"), igst=Decimal("9.00")),
        ]
        totals = calculate_invoice_totals(items)

        assert totals.subtotal == Decimal("250.00")
        assert totals.taxes.cgst == Decimal("9.00")
        assert totals.taxes.sgst == Decimal("9.00")
        assert totals.taxes.igst == Decimal("9.00")
        assert totals.tax_amount == Decimal("27.00")
        assert totals.total_amount == totals.subtotal + totals.tax_amount

    def test_subtotal_is_sum_of_quantity_times_price(self):
        items = [make_item(q, Decimal("19.99")) for q in (1, 2, 3)]
        totals = calculate_invoice_totals(items)
        assert totals.subtotal == Decimal("119.94")

    def test_to_money_rounds_half_up(self):
        assert to_money(Decimal("2.345")) == Decimal("2.35")
        assert to_money("1.004") == Decimal("1.00")
        assert to_money(None) == Decimal("0.00")


class TestCalculateEndpoint:
    """Tests para la vista previa de totales"""

    def test_calculate_preview(self, client, auth_headers):
        response = client.post("/invoices/calculate", json={
            "items": [
                {"product_name": "Laptop", "quantity": 2, "price": "100", "cgst": "9", "sgst": "9"},
                {"product_name": "Cable", "quantity": 1, "price": "10", "igst": "1.80"}
            ]
        }, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert Decimal(str(data["subtotal"])) == Decimal("210.00")
        assert Decimal(str(data["tax_amount"])) == Decimal("19.80")
        assert Decimal(str(data["total_amount"])) == Decimal("229.80")
        assert Decimal(str(data["taxes"]["igst"])) == Decimal("1.80")

    def test_calculate_rejects_non_positive_quantity(self, client, auth_headers):
        response = client.post("/invoices/calculate", json={
            "items": [{"product_name": "Laptop", "quantity": 0, "price": "100"}]
        }, headers=auth_headers)
        assert response.status_code == 422

    def test_calculate_requires_auth(self, client):
        response = client.post("/invoices/calculate", json={"items": []})
        assert response.status_code == 401
