"""
Tests für Auth Endpoints.

Testet:
- POST /auth/login
- POST /auth/refresh
- GET /auth/me
- PATCH /auth/me/password
"""
from uuid import uuid4

from app.models import User
from app.utils.security import hash_password
from tests.conftest import auth_header


class TestLogin:
    """Tests für POST /auth/login"""

    def test_login_success(self, client, owner_user):
        response = client.post("/auth/login", json={
            "email": "owner@test.com",
            "password": "ownerpass123"
        })

        assert response.status_code == 200
        data = response.json()
        assert "access_token" in data
        assert "refresh_token" in data
        assert data["token_type"] == "bearer"

    def test_login_wrong_password(self, client, owner_user):
        """Falsches Passwort → 401"""
        response = client.post("/auth/login", json={
            "email": "owner@test.com",
            "password": "wrongpassword"
        })

        assert response.status_code == 401

    def test_login_user_not_found(self, client):
        """User existiert nicht → 401"""
        response = client.post("/auth/login", json={
            "email": "gibts@nicht.com",
            "password": "egal"
        })

        assert response.status_code == 401

    def test_login_inactive_user(self, client, db, tenant, role_owner):
        """Inaktiver User → 401"""
        user = User(
            id=uuid4(),
            name="Inaktiv",
            email="inaktiv@test.com",
            password_hash=hash_password("test1234"),
            tenant_id=tenant.id,
            role_id=role_owner.id,
            is_active=False
        )
        db.add(user)
        db.commit()

        response = client.post("/auth/login", json={
            "email": "inaktiv@test.com",
            "password": "test1234"
        })

        assert response.status_code == 401


class TestRefreshToken:
    """Tests für POST /auth/refresh"""

    def test_refresh_success(self, client, owner_user):
        login_response = client.post("/auth/login", json={
            "email": "owner@test.com",
            "password": "ownerpass123"
        })
        refresh_token = login_response.json()["refresh_token"]

        response = client.post("/auth/refresh", json={
            "refresh_token": refresh_token
        })

        assert response.status_code == 200
        assert "access_token" in response.json()

    def test_refresh_invalid_token(self, client):
        """Ungültiger Refresh Token → 401"""
        response = client.post("/auth/refresh", json={
            "refresh_token": "invalid.token.here"
        })

        assert response.status_code == 401

    def test_refresh_with_access_token(self, client, owner_token):
        """Access Token statt Refresh Token → 401"""
        response = client.post("/auth/refresh", json={
            "refresh_token": owner_token
        })

        assert response.status_code == 401


class TestMe:
    """Tests für GET /auth/me"""

    def test_me_success(self, client, owner_token):
        response = client.get("/auth/me", headers=auth_header(owner_token))

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "owner@test.com"
        assert data["name"] == "Test Owner"
        assert data["role"]["name"] == "Owner"
        assert data["tenant"]["name"] == "Grupo Test"

    def test_me_without_auth(self, client):
        """Ohne Token → 401"""
        response = client.get("/auth/me")

        assert response.status_code == 401

    def test_me_invalid_token(self, client):
        """Ungültiger Token → 401"""
        response = client.get("/auth/me", headers=auth_header("invalid.token.here"))

        assert response.status_code == 401


class TestChangePassword:
    """Tests für PATCH /auth/me/password"""

    def test_change_password_success(self, client, owner_token):
        response = client.patch(
            "/auth/me/password",
            json={"old_password": "ownerpass123", "new_password": "neuespass456"},
            headers=auth_header(owner_token)
        )
        assert response.status_code == 200

        # Login mit neuem Passwort
        login = client.post("/auth/login", json={"email": "owner@test.com", "password": "neuespass456"})
        assert login.status_code == 200

    def test_change_password_wrong_old(self, client, owner_token):
        response = client.patch(
            "/auth/me/password",
            json={"old_password": "falsch123", "new_password": "neuespass456"},
            headers=auth_header(owner_token)
        )
        assert response.status_code == 400

    def test_change_password_too_short(self, client, owner_token):
        """Neues Passwort unter 8 Zeichen → 422"""
        response = client.patch(
            "/auth/me/password",
            json={"old_password": "ownerpass123", "new_password": "kurz"},
            headers=auth_header(owner_token)
        )
        assert response.status_code == 422
