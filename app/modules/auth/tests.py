"""
Tests para el módulo de Autenticación

Cubren registro, login (header Bearer y cookie), logout, cambio de
contraseña y el control de rol administrador.
"""

from app.modules.auth.utils import create_access_token, hash_password, verify_password, verify_token


class TestPasswordAndToken:
    """Tests de utilidades"""

    def test_hash_and_verify(self):
        hashed = hash_password("secreto123")
        assert hashed != "secreto123"
        assert verify_password("secreto123", hashed)
        assert not verify_password("otra", hashed)

    def test_token_roundtrip(self):
        token = create_access_token({"sub": "7", "username": "ana"})
        payload = verify_token(token)
        assert payload["sub"] == "7"
        assert payload["type"] == "access"


class TestRegisterLogin:
    """Tests de registro y login"""

    def test_register_returns_token(self, client):
        response = client.post("/auth/register", json={
            "username": "  priya ",
            "email": "Priya@Example.com",
            "password": "secreto123"
        })
        assert response.status_code == 201
        data = response.json()
        assert data["access_token"]
        assert data["token_type"] == "bearer"
        assert data["user"]["username"] == "priya"
        assert data["user"]["email"] == "priya@example.com"
        assert data["user"]["role"] == "user"

    def test_register_duplicate(self, client, auth_headers):
        response = client.post("/auth/register", json={
            "username": "cajero",
            "email": "otro@example.com",
            "password": "secreto123"
        })
        assert response.status_code == 409

    def test_register_validation(self, client):
        response = client.post("/auth/register", json={
            "username": "ab",
            "email": "not-an-email",
            "password": "123"
        })
        assert response.status_code == 422

    def test_login_wrong_password(self, client, auth_headers):
        response = client.post("/auth/login", json={"username": "cajero", "password": "incorrecta"})
        assert response.status_code == 401

    def test_login_unknown_user(self, client):
        response = client.post("/auth/login", json={"username": "nadie", "password": "secreto123"})
        assert response.status_code == 401

    def test_login_sets_cookie_usable_for_auth(self, client, auth_headers):
        response = client.post("/auth/login", json={"username": "cajero", "password": "secreto123"})
        assert response.status_code == 200
        assert "token" in response.cookies

        me = client.get("/auth/me")
        assert me.status_code == 200
        assert me.json()["username"] == "cajero"
        assert me.json()["last_login"] is not None


class TestProtectedEndpoints:
    """Tests de acceso a endpoints protegidos"""

    def test_me_with_bearer(self, client, auth_headers):
        response = client.get("/auth/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["email"] == "cajero@example.com"

    def test_missing_token(self, client):
        assert client.get("/auth/me").status_code == 401

    def test_invalid_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer basura"})
        assert response.status_code == 401

    def test_logout_clears_cookie(self, client, auth_headers):
        client.post("/auth/login", json={"username": "cajero", "password": "secreto123"})
        response = client.post("/auth/logout")
        assert response.status_code == 200
        assert client.get("/auth/me").status_code == 401

    def test_change_password(self, client, auth_headers):
        response = client.put("/auth/change-password", json={
            "current_password": "secreto123",
            "new_password": "nuevo12345"
        }, headers=auth_headers)
        assert response.status_code == 200

        old = client.post("/auth/login", json={"username": "cajero", "password": "secreto123"})
        assert old.status_code == 401
        new = client.post("/auth/login", json={"username": "cajero", "password": "nuevo12345"})
        assert new.status_code == 200

    def test_change_password_wrong_current(self, client, auth_headers):
        response = client.put("/auth/change-password", json={
            "current_password": "equivocada",
            "new_password": "nuevo12345"
        }, headers=auth_headers)
        assert response.status_code == 401


class TestAdminRole:
    """Tests del rol administrador"""

    def test_admin_login_role(self, client, admin_headers):
        response = client.get("/auth/me", headers=admin_headers)
        assert response.json()["role"] == "admin"

    def test_non_admin_forbidden(self, client, auth_headers):
        response = client.put("/settings/company_name", json={"value": "Acme"}, headers=auth_headers)
        assert response.status_code == 403
