"""
Tests para el módulo de Productos

Cubren CRUD, filtros por nivel de stock, operaciones manuales de stock y
el borrado de productos referenciados por facturas.
"""

from decimal import Decimal

from app.core.config import settings


def create_product(client, headers, name, stock=0, price="10.00", **extra):
    payload = {"name": name, "default_price": price, "stock_quantity": stock, **extra}
    response = client.post("/products/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestProductCrud:
    """Tests CRUD de productos"""

    def test_create_product(self, client, auth_headers):
        product = create_product(client, auth_headers, "Router", stock=4, price="49.90")
        assert product["name"] == "Router"
        assert product["stock_quantity"] == 4
        assert Decimal(str(product["default_price"])) == Decimal("49.90")

    def test_default_tax_rate_applied(self, client, auth_headers):
        product = create_product(client, auth_headers, "Switch")
        assert Decimal(str(product["default_tax_rate"])) == Decimal("18.00")

    def test_duplicate_name_conflict(self, client, auth_headers, sample_product):
        response = client.post("/products/", json={
            "name": "Laptop", "default_price": "1.00"
        }, headers=auth_headers)
        assert response.status_code == 409

    def test_negative_stock_rejected(self, client, auth_headers):
        response = client.post("/products/", json={
            "name": "Broken", "default_price": "1.00", "stock_quantity": -1
        }, headers=auth_headers)
        assert response.status_code == 422

    def test_get_missing_product(self, client, auth_headers):
        response = client.get("/products/999", headers=auth_headers)
        assert response.status_code == 404

    def test_update_keeps_omitted_fields(self, client, auth_headers, sample_product):
        response = client.put(f"/products/{sample_product['id']}", json={
            "default_price": "120.00"
        }, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert Decimal(str(data["default_price"])) == Decimal("120.00")
        assert data["name"] == "Laptop"
        assert data["stock_quantity"] == 10

    def test_list_requires_auth(self, client):
        assert client.get("/products/").status_code == 401


class TestProductFilters:
    """Tests de búsqueda y filtros de stock"""

    def test_stock_status_filters(self, client, auth_headers):
        create_product(client, auth_headers, "Agotado", stock=0)
        create_product(client, auth_headers, "Escaso", stock=2)
        create_product(client, auth_headers, "Abundante", stock=50)

        def names(status):
            response = client.get(f"/products/?stock_status={status}", headers=auth_headers)
            assert response.status_code == 200
            return {p["name"] for p in response.json()["products"]}

        assert names("out_of_stock") == {"Agotado"}
        assert names("low_stock") == {"Escaso"}
        assert names("in_stock") == {"Escaso", "Abundante"}

    def test_search_by_name(self, client, auth_headers):
        create_product(client, auth_headers, "USB Cable")
        create_product(client, auth_headers, "HDMI Cable")
        create_product(client, auth_headers, "Mouse")

        response = client.get("/products/?search=cable", headers=auth_headers)
        data = response.json()
        assert data["count"] == 2
        assert [p["name"] for p in data["products"]] == ["HDMI Cable", "USB Cable"]

    def test_page_size_bounds(self, client, auth_headers):
        assert client.get(f"/products/?limit={settings.MAX_PAGE_SIZE}", headers=auth_headers).status_code == 200
        response = client.get(f"/products/?limit={settings.MAX_PAGE_SIZE + 1}", headers=auth_headers)
        assert response.status_code == 422


class TestStockOperations:
    """Tests de PATCH /products/{id}/stock"""

    def test_add_remove_set(self, client, auth_headers, sample_product):
        url = f"/products/{sample_product['id']}/stock"

        response = client.patch(url, json={"quantity": 5, "operation": "add"}, headers=auth_headers)
        assert response.json()["stock_quantity"] == 15

        response = client.patch(url, json={"quantity": 3, "operation": "remove"}, headers=auth_headers)
        assert response.json()["stock_quantity"] == 12

        response = client.patch(url, json={"quantity": 7, "operation": "set"}, headers=auth_headers)
        assert response.json()["stock_quantity"] == 7

    def test_remove_clamps_at_zero(self, client, auth_headers, sample_product):
        response = client.patch(
            f"/products/{sample_product['id']}/stock",
            json={"quantity": 100, "operation": "remove"},
            headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["stock_quantity"] == 0

    def test_invalid_operation(self, client, auth_headers, sample_product):
        response = client.patch(
            f"/products/{sample_product['id']}/stock",
            json={"quantity": 1, "operation": "multiply"},
            headers=auth_headers
        )
        assert response.status_code == 422

    def test_missing_product(self, client, auth_headers):
        response = client.patch("/products/999/stock", json={"quantity": 1, "operation": "add"}, headers=auth_headers)
        assert response.status_code == 404


class TestProductDelete:
    """Tests de borrado de productos"""

    def test_delete_product(self, client, auth_headers, sample_product):
        response = client.delete(f"/products/{sample_product['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/products/{sample_product['id']}", headers=auth_headers).status_code == 404

    def test_delete_product_used_by_invoice_keeps_item(self, client, auth_headers, sample_customer, sample_product):
        response = client.post("/invoices/", json={
            "customer_id": sample_customer["id"],
            "invoice_date": "2026-01-05",
            "items": [{
                "product_id": sample_product["id"],
                "product_name": "Laptop",
                "quantity": 1,
                "price": "100"
            }]
        }, headers=auth_headers)
        assert response.status_code == 201
        invoice_id = response.json()["id"]

        response = client.delete(f"/products/{sample_product['id']}", headers=auth_headers)
        assert response.status_code == 200

        invoice = client.get(f"/invoices/{invoice_id}", headers=auth_headers).json()
        assert invoice["items"][0]["product_id"] is None
        assert invoice["items"][0]["product_name"] == "Laptop"
