"""
Fixtures compartidas por los tests de todos los módulos.

La aplicación se apunta a una base SQLite en memoria antes de importarla;
el esquema se crea y se elimina en cada test.
"""
import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.database.database import Base, engine, SessionLocal
from app.modules.auth.schemas import UserCreate
from app.modules.auth.service import AuthService
from app.modules.settings.service import SettingsService


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


def _login(client: TestClient, username: str, password: str) -> dict:
    response = client.post("/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200
    # Los tests envían el token explícitamente; la cookie no debe filtrarse
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    """Headers de un usuario normal registrado por la API"""
    response = client.post("/auth/register", json={
        "username": "cajero",
        "email": "cajero@example.com",
        "password": "secreto123"
    })
    assert response.status_code == 201
    return _login(client, "cajero", "secreto123")


@pytest.fixture
def admin_headers(client, db_session):
    """Headers de un administrador creado directamente en la base"""
    AuthService(db_session).create_user(
        UserCreate(username="admin", email="admin@example.com", password="admin1234"),
        role="admin"
    )
    return _login(client, "admin", "admin1234")


@pytest.fixture
def default_settings(db_session):
    SettingsService(db_session).ensure_defaults()


@pytest.fixture
def sample_customer(client, auth_headers):
    response = client.post("/customers/", json={
        "name": "Ravi Traders",
        "email": "ravi@example.com",
        "phone": "9876543210",
        "address": "12 MG Road, Bengaluru",
        "gstin": "29abcde1234f1z5"
    }, headers=auth_headers)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def sample_product(client, auth_headers):
    response = client.post("/products/", json={
        "name": "Laptop",
        "default_price": "100.00",
        "default_tax_rate": "18.00",
        "stock_quantity": 10
    }, headers=auth_headers)
    assert response.status_code == 201
    return response.json()
