"""
Tests para el módulo de Configuración
"""

import pytest
from fastapi import HTTPException

from app.modules.settings.models import Setting, NEXT_INVOICE_NUMBER_KEY
from app.modules.settings.service import SettingsService, increment_invoice_counter, DEFAULT_SETTINGS


class TestDefaults:

    def test_ensure_defaults_is_idempotent(self, db_session):
        service = SettingsService(db_session)
        assert service.ensure_defaults() == len(DEFAULT_SETTINGS)
        assert service.ensure_defaults() == 0
        assert service.get_all()[NEXT_INVOICE_NUMBER_KEY] == "1"

    def test_ensure_defaults_keeps_existing_values(self, db_session):
        db_session.add(Setting(key="company_name", value="Acme Pvt Ltd"))
        db_session.commit()

        SettingsService(db_session).ensure_defaults()
        assert SettingsService(db_session).get_all()["company_name"] == "Acme Pvt Ltd"


class TestInvoiceCounter:

    def test_increment(self, db_session, default_settings):
        increment_invoice_counter(db_session)
        increment_invoice_counter(db_session)
        db_session.commit()
        db_session.expire_all()
        assert SettingsService(db_session).get_setting(NEXT_INVOICE_NUMBER_KEY).value == "3"

    def test_increment_creates_missing_key(self, db_session):
        increment_invoice_counter(db_session)
        db_session.commit()
        assert SettingsService(db_session).get_setting(NEXT_INVOICE_NUMBER_KEY).value == "2"

    def test_rollback_undoes_increment(self, db_session, default_settings):
        increment_invoice_counter(db_session)
        db_session.rollback()
        assert SettingsService(db_session).get_setting(NEXT_INVOICE_NUMBER_KEY).value == "1"


class TestSettingsApi:

    def test_list_settings(self, client, auth_headers, default_settings):
        response = client.get("/settings/", headers=auth_headers)
        assert response.status_code == 200
        settings = response.json()["settings"]
        assert settings[NEXT_INVOICE_NUMBER_KEY] == "1"
        assert "invoice_footer" in settings

    def test_get_missing_setting(self, client, auth_headers):
        response = client.get("/settings/unknown_key", headers=auth_headers)
        assert response.status_code == 404

    def test_admin_upsert(self, client, admin_headers):
        response = client.put("/settings/company_name", json={"value": "Acme Pvt Ltd"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["value"] == "Acme Pvt Ltd"

        response = client.put("/settings/company_name", json={"value": "Acme India"}, headers=admin_headers)
        assert response.json()["value"] == "Acme India"

        response = client.get("/settings/company_name", headers=admin_headers)
        assert response.json()["value"] == "Acme India"

    def test_numeric_values_are_stored_as_text(self, client, admin_headers):
        response = client.put("/settings/next_invoice_number", json={"value": 42}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["value"] == "42"

    def test_invalid_counter_value(self, client, admin_headers):
        response = client.put("/settings/next_invoice_number", json={"value": "INV-1"}, headers=admin_headers)
        assert response.status_code == 400

    def test_non_ascii_digits_rejected(self, client, admin_headers):
        for value in ("²", "٣", "0"):
            response = client.put("/settings/next_invoice_number", json={"value": value}, headers=admin_headers)
            assert response.status_code == 400

    def test_counter_validation_direct(self, db_session):
        service = SettingsService(db_session)
        for value in ("²", "-1", "1.5"):
            with pytest.raises(HTTPException) as exc_info:
                service.upsert_setting(NEXT_INVOICE_NUMBER_KEY, value)
            assert exc_info.value.status_code == 400

    def test_bulk_update(self, client, admin_headers, default_settings):
        response = client.post("/settings/bulk", json={"settings": {
            "company_name": "Acme",
            "seller_phone": "080-1111",
            "invoice_footer": "Gracias por su compra"
        }}, headers=admin_headers)

        assert response.status_code == 200
        settings = response.json()["settings"]
        assert settings["company_name"] == "Acme"
        assert settings["seller_phone"] == "080-1111"
        assert settings[NEXT_INVOICE_NUMBER_KEY] == "1"

    def test_bulk_update_is_all_or_nothing(self, client, admin_headers, default_settings):
        response = client.post("/settings/bulk", json={"settings": {
            "company_name": "Acme",
            NEXT_INVOICE_NUMBER_KEY: "abc"
        }}, headers=admin_headers)
        assert response.status_code == 400

        response = client.get("/settings/company_name", headers=admin_headers)
        assert response.json()["value"] == ""

    def test_bulk_requires_admin(self, client, auth_headers):
        response = client.post("/settings/bulk", json={"settings": {"company_name": "X"}}, headers=auth_headers)
        assert response.status_code == 403
