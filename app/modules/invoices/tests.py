"""
Tests para el módulo de Facturación

Cubren:
- Creación con descuento de stock y avance del contador de facturas
- Rechazo completo por stock insuficiente
- Edición con reemplazo de líneas y ajuste neto de stock
- Pago único por factura y bloqueo de edición tras el pago
- Borrado con devolución de stock
- Listado con filtros y paginación
"""

import pytest
from decimal import Decimal

from app.core.config import settings
from app.modules.invoices.schemas import InvoiceFilters, PaymentStatus
from app.modules.invoices.service import build_invoice_predicates


def money(value) -> Decimal:
    return Decimal(str(value))


def stock_of(client, headers, product_id) -> int:
    response = client.get(f"/products/{product_id}", headers=headers)
    assert response.status_code == 200
    return response.json()["stock_quantity"]


def invoice_counter(client, headers) -> str:
    return client.get("/settings/next_invoice_number", headers=headers).json()["value"]


def item(product, quantity, price="100", **extra):
    data = {
        "product_id": product["id"] if product else None,
        "product_name": product["name"] if product else "Servicio",
        "quantity": quantity,
        "price": price
    }
    data.update(extra)
    return data


@pytest.fixture
def create_invoice(client, auth_headers, sample_customer):
    def _create(items, **extra):
        payload = {"customer_id": sample_customer["id"], "invoice_date": "2026-01-05", "items": items, **extra}
        return client.post("/invoices/", json=payload, headers=auth_headers)
    return _create


@pytest.fixture
def low_stock_product(client, auth_headers):
    response = client.post("/products/", json={
        "name": "Projector", "default_price": "300", "stock_quantity": 2
    }, headers=auth_headers)
    return response.json()


class TestCreateInvoice:
    """Tests de creación de facturas"""

    def test_create_decrements_stock_and_totals(
        self, client, auth_headers, sample_product, create_invoice, default_settings
    ):
        response = create_invoice([item(sample_product, 3, "100")])

        assert response.status_code == 201
        data = response.json()
        assert money(data["subtotal"]) == Decimal("300.00")
        assert money(data["tax_amount"]) == Decimal("0.00")
        assert money(data["total_amount"]) == Decimal("300.00")
        assert data["payment_received"] is False
        assert data["payment_terms"] == "On Receipt"
        assert data["customer_name"] == "Ravi Traders"
        assert "items" not in data

        assert stock_of(client, auth_headers, sample_product["id"]) == 7
        assert invoice_counter(client, auth_headers) == "2"

    def test_totals_include_gst_components(self, create_invoice, sample_product):
        response = create_invoice([
            item(sample_product, 2, "100", cgst="9", sgst="9"),
            item(None, 1, "50", igst="9")
        ])
        data = response.json()
        assert money(data["subtotal"]) == Decimal("250.00")
        assert money(data["tax_amount"]) == Decimal("27.00")
        assert money(data["total_amount"]) == money(data["subtotal"]) + money(data["tax_amount"])

    def test_server_computes_line_total(self, client, auth_headers, create_invoice):
        payload_item = item(None, 2, "10", cgst="1", sgst="1")
        payload_item["total"] = "99999"
        invoice_id = create_invoice([payload_item]).json()["id"]

        detail = client.get(f"/invoices/{invoice_id}", headers=auth_headers).json()
        assert money(detail["items"][0]["total"]) == Decimal("22.00")

    def test_insufficient_stock_rejects_everything(
        self, client, auth_headers, low_stock_product, sample_product, create_invoice, default_settings
    ):
        response = create_invoice([
            item(sample_product, 1),
            item(low_stock_product, 5, "300")
        ])

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["product_id"] == low_stock_product["id"]
        assert detail["requested_quantity"] == 5
        assert detail["available_quantity"] == 2

        assert stock_of(client, auth_headers, low_stock_product["id"]) == 2
        assert stock_of(client, auth_headers, sample_product["id"]) == 10
        assert client.get("/invoices/", headers=auth_headers).json()["total"] == 0
        assert invoice_counter(client, auth_headers) == "1"

    def test_same_product_on_several_lines_is_summed(self, client, auth_headers, low_stock_product, create_invoice):
        response = create_invoice([
            item(low_stock_product, 1, "300"),
            item(low_stock_product, 2, "300")
        ])
        assert response.status_code == 409
        assert response.json()["detail"]["requested_quantity"] == 3
        assert stock_of(client, auth_headers, low_stock_product["id"]) == 2

    def test_unknown_customer(self, client, auth_headers):
        response = client.post("/invoices/", json={
            "customer_id": 999,
            "invoice_date": "2026-01-05",
            "items": [item(None, 1)]
        }, headers=auth_headers)
        assert response.status_code == 400

    def test_unknown_product(self, create_invoice):
        response = create_invoice([{"product_id": 999, "product_name": "Ghost", "quantity": 1, "price": "1"}])
        assert response.status_code == 400

    def test_empty_items_rejected(self, create_invoice):
        assert create_invoice([]).status_code == 422

    def test_invalid_quantity_rejected(self, create_invoice):
        assert create_invoice([item(None, 0)]).status_code == 422
        assert create_invoice([item(None, 1, "-5")]).status_code == 422

    def test_requires_auth(self, client, sample_customer):
        response = client.post("/invoices/", json={
            "customer_id": sample_customer["id"], "invoice_date": "2026-01-05", "items": [item(None, 1)]
        })
        assert response.status_code == 401

    def test_created_by_current_user(self, client, auth_headers, create_invoice):
        me = client.get("/auth/me", headers=auth_headers).json()
        data = create_invoice([item(None, 1)]).json()
        assert data["created_by"] == me["id"]

    def test_invoice_date_required(self, client, auth_headers, sample_customer, sample_product, default_settings):
        response = client.post("/invoices/", json={
            "customer_id": sample_customer["id"],
            "items": [item(sample_product, 1)]
        }, headers=auth_headers)
        assert response.status_code == 422
        assert stock_of(client, auth_headers, sample_product["id"]) == 10
        assert invoice_counter(client, auth_headers) == "1"

    def test_invalid_invoice_date_rejected(self, create_invoice):
        assert create_invoice([item(None, 1)], invoice_date="05/01/2026").status_code == 422


class TestGetInvoice:
    """Tests de consulta de una factura"""

    def test_items_returned_in_insertion_order(self, client, auth_headers, create_invoice):
        names = ["Zeta cable", "Alpha board", "Mid adapter"]
        invoice_id = create_invoice([
            {"product_name": name, "quantity": 1, "price": "5", "serial_number": f"SN-{i}", "warranty": "1 año"}
            for i, name in enumerate(names)
        ]).json()["id"]

        response = client.get(f"/invoices/{invoice_id}", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert [i["product_name"] for i in data["items"]] == names
        assert data["items"][1]["serial_number"] == "SN-1"
        assert data["customer_gstin"] == "29ABCDE1234F1Z5"

    def test_missing_invoice(self, client, auth_headers):
        assert client.get("/invoices/999", headers=auth_headers).status_code == 404


class TestUpdateInvoice:
    """Tests de edición de facturas"""

    def test_replace_items_applies_net_stock_change(self, client, auth_headers, sample_product, create_invoice):
        invoice_id = create_invoice([item(sample_product, 3)]).json()["id"]
        assert stock_of(client, auth_headers, sample_product["id"]) == 7

        response = client.put(f"/invoices/{invoice_id}", json={
            "items": [item(sample_product, 5, "80", cgst="7.20", sgst="7.20"), item(None, 1, "20")]
        }, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert stock_of(client, auth_headers, sample_product["id"]) == 5

        detail = client.get(f"/invoices/{invoice_id}", headers=auth_headers).json()
        assert len(detail["items"]) == 2
        assert money(detail["subtotal"]) == Decimal("420.00")
        assert money(detail["tax_amount"]) == Decimal("14.40")
        assert money(detail["total_amount"]) == Decimal("434.40")

    def test_omitted_items_keep_items_totals_and_stock(self, client, auth_headers, sample_product, create_invoice):
        invoice_id = create_invoice([item(sample_product, 3)]).json()["id"]

        response = client.put(f"/invoices/{invoice_id}", json={
            "payment_terms": "Net 30",
            "invoice_date": "2026-01-15"
        }, headers=auth_headers)
        assert response.status_code == 200

        detail = client.get(f"/invoices/{invoice_id}", headers=auth_headers).json()
        assert detail["payment_terms"] == "Net 30"
        assert detail["invoice_date"] == "2026-01-15"
        assert len(detail["items"]) == 1
        assert money(detail["total_amount"]) == Decimal("300.00")
        assert stock_of(client, auth_headers, sample_product["id"]) == 7

    def test_update_insufficient_stock_rolls_back(self, client, auth_headers, sample_product, create_invoice):
        invoice_id = create_invoice([item(sample_product, 3)]).json()["id"]

        response = client.put(f"/invoices/{invoice_id}", json={
            "items": [item(sample_product, 11)]
        }, headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["detail"]["available_quantity"] == 10
        assert stock_of(client, auth_headers, sample_product["id"]) == 7
        detail = client.get(f"/invoices/{invoice_id}", headers=auth_headers).json()
        assert detail["items"][0]["quantity"] == 3

    def test_empty_items_rejected(self, client, auth_headers, create_invoice):
        invoice_id = create_invoice([item(None, 1)]).json()["id"]
        response = client.put(f"/invoices/{invoice_id}", json={"items": []}, headers=auth_headers)
        assert response.status_code == 422

    def test_update_missing_invoice(self, client, auth_headers):
        response = client.put("/invoices/999", json={"payment_terms": "Net 15"}, headers=auth_headers)
        assert response.status_code == 404

    def test_update_unknown_customer(self, client, auth_headers, create_invoice):
        invoice_id = create_invoice([item(None, 1)]).json()["id"]
        response = client.put(f"/invoices/{invoice_id}", json={"customer_id": 999}, headers=auth_headers)
        assert response.status_code == 400


class TestPayment:
    """Tests de registro de pagos"""

    def test_record_payment(self, client, auth_headers, create_invoice):
        invoice_id = create_invoice([item(None, 3)]).json()["id"]

        response = client.post(f"/invoices/{invoice_id}/payment", json={
            "payment_date": "2026-02-01",
            "payment_amount": "300.00"
        }, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["payment_received"] is True
        assert data["payment_date"] == "2026-02-01"
        assert money(data["payment_amount"]) == Decimal("300.00")

    def test_second_payment_rejected_and_first_kept(self, client, auth_headers, create_invoice):
        invoice_id = create_invoice([item(None, 3)]).json()["id"]
        url = f"/invoices/{invoice_id}/payment"

        first = client.post(url, json={"payment_date": "2026-02-01", "payment_amount": "300"}, headers=auth_headers)
        assert first.status_code == 200

        second = client.post(url, json={"payment_date": "2026-03-01", "payment_amount": "1"}, headers=auth_headers)
        assert second.status_code == 409

        detail = client.get(f"/invoices/{invoice_id}", headers=auth_headers).json()
        assert detail["payment_date"] == "2026-02-01"
        assert money(detail["payment_amount"]) == Decimal("300.00")

    def test_payment_on_missing_invoice(self, client, auth_headers):
        response = client.post("/invoices/999/payment", json={"payment_date": "2026-02-01", "payment_amount": "10"}, headers=auth_headers)
        assert response.status_code == 409

    def test_negative_amount_rejected(self, client, auth_headers, create_invoice):
        invoice_id = create_invoice([item(None, 1)]).json()["id"]
        response = client.post(f"/invoices/{invoice_id}/payment", json={"payment_date": "2026-02-01", "payment_amount": "-1"}, headers=auth_headers)
        assert response.status_code == 422

    def test_payment_date_required(self, client, auth_headers, create_invoice):
        invoice_id = create_invoice([item(None, 1)]).json()["id"]
        response = client.post(f"/invoices/{invoice_id}/payment", json={"payment_amount": "100"}, headers=auth_headers)
        assert response.status_code == 422

        detail = client.get(f"/invoices/{invoice_id}", headers=auth_headers).json()
        assert detail["payment_received"] is False
        assert detail["payment_date"] is None

    def test_paid_invoice_cannot_be_updated(self, client, auth_headers, sample_product, create_invoice):
        invoice_id = create_invoice([item(sample_product, 3)]).json()["id"]
        client.post(f"/invoices/{invoice_id}/payment", json={"payment_date": "2026-02-01", "payment_amount": "300"}, headers=auth_headers)

        response = client.put(f"/invoices/{invoice_id}", json={
            "payment_terms": "Net 30",
            "items": [item(sample_product, 1)]
        }, headers=auth_headers)
        assert response.status_code == 409

        detail = client.get(f"/invoices/{invoice_id}", headers=auth_headers).json()
        assert detail["payment_terms"] == "On Receipt"
        assert detail["items"][0]["quantity"] == 3
        assert stock_of(client, auth_headers, sample_product["id"]) == 7

    def test_paid_invoice_can_be_deleted(self, client, auth_headers, sample_product, create_invoice):
        invoice_id = create_invoice([item(sample_product, 3)]).json()["id"]
        client.post(f"/invoices/{invoice_id}/payment", json={"payment_date": "2026-02-01", "payment_amount": "300"}, headers=auth_headers)

        response = client.delete(f"/invoices/{invoice_id}", headers=auth_headers)
        assert response.status_code == 200
        assert stock_of(client, auth_headers, sample_product["id"]) == 10


class TestDeleteInvoice:
    """Tests de borrado de facturas"""

    def test_delete_restores_stock(self, client, auth_headers, sample_product, low_stock_product, create_invoice):
        invoice_id = create_invoice([
            item(sample_product, 4),
            item(low_stock_product, 2, "300"),
            item(None, 1)
        ]).json()["id"]
        assert stock_of(client, auth_headers, sample_product["id"]) == 6
        assert stock_of(client, auth_headers, low_stock_product["id"]) == 0

        response = client.delete(f"/invoices/{invoice_id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["success"] is True

        assert stock_of(client, auth_headers, sample_product["id"]) == 10
        assert stock_of(client, auth_headers, low_stock_product["id"]) == 2
        assert client.get(f"/invoices/{invoice_id}", headers=auth_headers).status_code == 404

    def test_delete_missing_invoice(self, client, auth_headers):
        assert client.delete("/invoices/999", headers=auth_headers).status_code == 404


class TestListInvoices:
    """Tests de listado y filtros"""

    @pytest.fixture
    def invoices(self, client, auth_headers, sample_customer, create_invoice):
        other = client.post("/customers/", json={"name": "Meera Stores", "phone": "044-555"}, headers=auth_headers).json()

        first = create_invoice([item(None, 1)], invoice_date="2026-01-10").json()
        second = client.post("/invoices/", json={
            "customer_id": other["id"],
            "invoice_date": "2026-02-10",
            "items": [item(None, 2)]
        }, headers=auth_headers).json()
        third = create_invoice([item(None, 3)], invoice_date="2026-03-10").json()

        client.post(f"/invoices/{first['id']}/payment", json={"payment_date": "2026-02-01", "payment_amount": "100"}, headers=auth_headers)
        return first, second, third

    def list_ids(self, client, headers, query=""):
        response = client.get(f"/invoices/{query}", headers=headers)
        assert response.status_code == 200
        return [inv["id"] for inv in response.json()["invoices"]]

    def test_newest_first(self, client, auth_headers, invoices):
        first, second, third = invoices
        assert self.list_ids(client, auth_headers) == [third["id"], second["id"], first["id"]]

    def test_status_filter(self, client, auth_headers, invoices):
        first, second, third = invoices
        assert self.list_ids(client, auth_headers, "?status=paid") == [first["id"]]
        assert self.list_ids(client, auth_headers, "?status=unpaid") == [third["id"], second["id"]]

    def test_customer_filters(self, client, auth_headers, invoices):
        _, second, _ = invoices
        assert self.list_ids(client, auth_headers, "?customer_name=meera") == [second["id"]]
        assert self.list_ids(client, auth_headers, "?customer_phone=555") == [second["id"]]

    def test_date_range(self, client, auth_headers, invoices):
        _, second, third = invoices
        ids = self.list_ids(client, auth_headers, "?date_from=2026-02-01&date_to=2026-03-31")
        assert ids == [third["id"], second["id"]]

    def test_pagination_reports_total(self, client, auth_headers, invoices):
        response = client.get("/invoices/?limit=2&offset=1", headers=auth_headers)
        data = response.json()
        assert data["count"] == 2
        assert data["total"] == 3
        assert data["limit"] == 2
        assert data["offset"] == 1

    def test_rows_carry_customer_fields(self, client, auth_headers, invoices):
        data = client.get("/invoices/?customer_name=ravi", headers=auth_headers).json()
        assert {inv["customer_name"] for inv in data["invoices"]} == {"Ravi Traders"}
        assert all(inv["customer_phone"] == "9876543210" for inv in data["invoices"])

    def test_invalid_status_rejected(self, client, auth_headers):
        assert client.get("/invoices/?status=void", headers=auth_headers).status_code == 422

    def test_default_page_size(self, client, auth_headers, invoices):
        data = client.get("/invoices/", headers=auth_headers).json()
        assert data["limit"] == settings.DEFAULT_PAGE_SIZE
        assert data["offset"] == 0

    def test_limit_bounds(self, client, auth_headers):
        url = "/invoices/?limit={}"
        assert client.get(url.format(settings.MAX_PAGE_SIZE), headers=auth_headers).status_code == 200
        assert client.get(url.format(settings.MAX_PAGE_SIZE + 1), headers=auth_headers).status_code == 422
        assert client.get(url.format(0), headers=auth_headers).status_code == 422


class TestInvoicePredicates:
    """Tests de construcción de filtros"""

    def test_no_filters(self):
        assert build_invoice_predicates(InvoiceFilters()) == []

    def test_one_predicate_per_filter(self):
        filters = InvoiceFilters(
            status=PaymentStatus.UNPAID,
            customer_name="ravi",
            customer_phone="98",
            date_from="2026-01-01",
            date_to="2026-12-31"
        )
        assert len(build_invoice_predicates(filters)) == 5
