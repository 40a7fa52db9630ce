"""
Tests para el módulo de Clientes

Cubren:
- CRUD completo
- Normalización y validación de GSTIN
- Búsqueda por nombre, email o teléfono
- Bloqueo del borrado cuando el cliente tiene facturas
"""

import pytest

from app.core.config import settings


@pytest.fixture
def customer_payload():
    """Datos de ejemplo para crear clientes"""
    return {
        "name": "Sharma Electronics",
        "email": "Contact@Sharma.example.com",
        "phone": " 080-2345-6789 ",
        "address": "45 Brigade Road, Bengaluru",
        "gstin": "29 aaacs1234h1z9"
    }


class TestCustomerCreate:
    """Tests de creación"""

    def test_create_customer(self, client, auth_headers, customer_payload):
        response = client.post("/customers/", json=customer_payload, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Sharma Electronics"
        assert data["email"] == "contact@sharma.example.com"
        assert data["phone"] == "080-2345-6789"
        assert data["gstin"] == "29AAACS1234H1Z9"

    def test_only_name_required(self, client, auth_headers):
        response = client.post("/customers/", json={"name": "Walk-in", "email": ""}, headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["email"] is None
        assert response.json()["gstin"] is None

    def test_invalid_gstin(self, client, auth_headers):
        response = client.post("/customers/", json={"name": "Bad GST", "gstin": "12345"}, headers=auth_headers)
        assert response.status_code == 422

    def test_blank_name_rejected(self, client, auth_headers):
        response = client.post("/customers/", json={"name": "   "}, headers=auth_headers)
        assert response.status_code == 422

    def test_duplicate_name_conflict(self, client, auth_headers, sample_customer):
        response = client.post("/customers/", json={"name": "Ravi Traders"}, headers=auth_headers)
        assert response.status_code == 409

    def test_requires_auth(self, client, customer_payload):
        response = client.post("/customers/", json=customer_payload)
        assert response.status_code == 401


class TestCustomerQueries:
    """Tests de consulta y búsqueda"""

    def test_get_customer(self, client, auth_headers, sample_customer):
        response = client.get(f"/customers/{sample_customer['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["gstin"] == "29ABCDE1234F1Z5"

    def test_get_missing_customer(self, client, auth_headers):
        response = client.get("/customers/999", headers=auth_headers)
        assert response.status_code == 404

    def test_search_and_order(self, client, auth_headers):
        for name, phone in [("Zeta Corp", "111"), ("Alpha Stores", "222"), ("Beta Mart", "111")]:
            client.post("/customers/", json={"name": name, "phone": phone}, headers=auth_headers)

        response = client.get("/customers/", headers=auth_headers)
        assert [c["name"] for c in response.json()["customers"]] == ["Alpha Stores", "Beta Mart", "Zeta Corp"]

        response = client.get("/customers/?search=111", headers=auth_headers)
        assert [c["name"] for c in response.json()["customers"]] == ["Beta Mart", "Zeta Corp"]

    def test_pagination(self, client, auth_headers):
        for i in range(5):
            client.post("/customers/", json={"name": f"Cliente {i}"}, headers=auth_headers)

        response = client.get("/customers/?limit=2&offset=2", headers=auth_headers)
        data = response.json()
        assert data["count"] == 2
        assert data["limit"] == 2
        assert data["offset"] == 2
        assert [c["name"] for c in data["customers"]] == ["Cliente 2", "Cliente 3"]

    def test_page_size_bounds(self, client, auth_headers):
        assert client.get("/customers/", headers=auth_headers).json()["limit"] == settings.DEFAULT_PAGE_SIZE
        response = client.get(f"/customers/?limit={settings.MAX_PAGE_SIZE + 1}", headers=auth_headers)
        assert response.status_code == 422


class TestCustomerUpdateDelete:
    """Tests de actualización y borrado"""

    def test_update_keeps_omitted_fields(self, client, auth_headers, sample_customer):
        response = client.put(
            f"/customers/{sample_customer['id']}",
            json={"phone": "9000000000"},
            headers=auth_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["phone"] == "9000000000"
        assert data["name"] == "Ravi Traders"
        assert data["email"] == "ravi@example.com"

    def test_rename_to_existing_name_conflict(self, client, auth_headers, sample_customer):
        other = client.post("/customers/", json={"name": "Other"}, headers=auth_headers).json()
        response = client.put(f"/customers/{other['id']}", json={"name": "Ravi Traders"}, headers=auth_headers)
        assert response.status_code == 409

    def test_delete_customer(self, client, auth_headers, sample_customer):
        response = client.delete(f"/customers/{sample_customer['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert client.get(f"/customers/{sample_customer['id']}", headers=auth_headers).status_code == 404

    def test_delete_missing_customer(self, client, auth_headers):
        assert client.delete("/customers/999", headers=auth_headers).status_code == 404

    def test_delete_customer_with_invoices_conflict(self, client, auth_headers, sample_customer):
        response = client.post("/invoices/", json={
            "customer_id": sample_customer["id"],
            "invoice_date": "2026-01-05",
            "items": [{"product_name": "Consulting", "quantity": 1, "price": "500"}]
        }, headers=auth_headers)
        assert response.status_code == 201

        response = client.delete(f"/customers/{sample_customer['id']}", headers=auth_headers)
        assert response.status_code == 409

        # Nada cambia
        assert client.get(f"/customers/{sample_customer['id']}", headers=auth_headers).status_code == 200
        invoices = client.get("/invoices/", headers=auth_headers).json()
        assert invoices["total"] == 1
