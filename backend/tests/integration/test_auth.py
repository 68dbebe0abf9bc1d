"""Integration tests for authentication endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.system import system_config
from infrastructure.database.models.user import User

pytestmark = pytest.mark.asyncio

COOKIE = "quill-session"
TEST_PASSWORD = "testpassword123"

class TestLogin:
    """Tests for password sign-in."""

    async def test_login_success(self, async_client: AsyncClient, test_user: User):
        """Test successful login returns a session token and sets the cookie."""
        response = await async_client.post(
            "/api/v1/auth/login", json={"email": test_user.email, "password": TEST_PASSWORD}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["session_token"]
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 60 * 60 * 24 * 30
        assert data["session"]["item_id"] == test_user.id
        assert data["session"]["list_key"] == "User"
        assert data["session"]["data"]["name"] == "Test User"
        assert "created_at" in data["session"]["data"]
        assert COOKIE in response.cookies

    async def test_login_email_case_insensitive(self, async_client: AsyncClient, test_user: User):
        response = await async_client.post(
            "/api/v1/auth/login", json={"email": "TEST@example.com", "password": TEST_PASSWORD}
        )
        assert response.status_code == 200

    async def test_login_wrong_password(self, async_client: AsyncClient, test_user: User):
        """Test login with wrong password."""
        response = await async_client.post(
            "/api/v1/auth/login", json={"email": test_user.email, "password": "wrongpassword"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    async def test_login_unknown_email(self, async_client: AsyncClient, test_user: User):
        """Unknown emails get the same answer as wrong passwords."""
        response = await async_client.post(
            "/api/v1/auth/login", json={"email": "nobody@example.com", "password": TEST_PASSWORD}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    async def test_login_invalid_body(self, async_client: AsyncClient):
        response = await async_client.post("/api/v1/auth/login", json={"email": "not-an-email"})
        assert response.status_code == 422

    async def test_login_rate_limited(self, async_client: AsyncClient, test_user: User):
        """Sign-in is limited to 5 attempts per minute per client."""
        for _ in range(5):
            response = await async_client.post(
                "/api/v1/auth/login", json={"email": test_user.email, "password": "wrongpassword"}
            )
            assert response.status_code == 401

        response = await async_client.post(
            "/api/v1/auth/login", json={"email": test_user.email, "password": TEST_PASSWORD}
        )
        assert response.status_code == 429

class TestSession:
    """Tests for resolving the current session."""

    async def test_no_session(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/auth/session")
        assert response.status_code == 200
        assert response.json() == {"session": None}

    async def test_session_from_bearer_header(
        self, async_client: AsyncClient, test_user: User, auth_headers: dict
    ):
        response = await async_client.get("/api/v1/auth/session", headers=auth_headers)
        session = response.json()["session"]
        assert session["item_id"] == test_user.id
        assert session["data"]["id"] == test_user.id
        assert session["data"]["name"] == test_user.name

    async def test_session_from_cookie(self, async_client: AsyncClient, test_user: User):
        """The cookie set at sign-in authenticates later requests."""
        await async_client.post(
            "/api/v1/auth/login", json={"email": test_user.email, "password": TEST_PASSWORD}
        )
        response = await async_client.get("/api/v1/auth/session")
        assert response.json()["session"]["item_id"] == test_user.id

    async def test_invalid_token(self, async_client: AsyncClient):
        response = await async_client.get(
            "/api/v1/auth/session", headers={"Authorization": "Bearer garbage"}
        )
        assert response.json() == {"session": None}

    async def test_session_of_deleted_user(self, async_client: AsyncClient):
        """A token for an item that no longer exists does not authenticate."""
        token = system_config.session.start(str(uuid4()), "User")
        response = await async_client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired session"

    async def test_me(self, async_client: AsyncClient, test_user: User, auth_headers: dict):
        response = await async_client.get("/api/v1/auth/me", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == test_user.email
        assert "password" not in data
        assert "password_hash" not in data

    async def test_me_unauthenticated(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    async def test_logout_clears_cookie(self, async_client: AsyncClient, test_user: User):
        await async_client.post(
            "/api/v1/auth/login", json={"email": test_user.email, "password": TEST_PASSWORD}
        )
        response = await async_client.post("/api/v1/auth/logout")
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert "Max-Age=0" in response.headers["set-cookie"]

        response = await async_client.get("/api/v1/auth/session")
        assert response.json() == {"session": None}


class TestInitFirstItem:
    """Creating the first user while the User list is empty."""

    async def test_init_status_when_empty(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/auth/init")
        assert response.status_code == 200
        assert response.json() == {"needs_init": True, "fields": ["name", "email", "password"]}

    async def test_init_status_with_users(self, async_client: AsyncClient, test_user: User):
        response = await async_client.get("/api/v1/auth/init")
        assert response.json()["needs_init"] is False

    async def test_create_first_user(self, async_client: AsyncClient, db_session: AsyncSession):
        response = await async_client.post(
            "/api/v1/auth/init",
            json={"name": "Admin", "email": "Admin@Example.com", "password": "SecurePass123!"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["session"]["data"]["name"] == "Admin"
        assert COOKIE in response.cookies

        user = (await db_session.execute(select(User))).scalar_one()
        assert user.email == "admin@example.com"
        assert user.password_hash != "SecurePass123!"

        # The new user is signed in straight away
        response = await async_client.get("/api/v1/auth/me")
        assert response.json()["email"] == "admin@example.com"

    async def test_first_user_only_once(
        self, async_client: AsyncClient, test_user: User, db_session: AsyncSession
    ):
        response = await async_client.post(
            "/api/v1/auth/init",
            json={"name": "Second", "email": "second@example.com", "password": "SecurePass123!"},
        )
        assert response.status_code == 403
        count = (await db_session.execute(select(func.count()).select_from(User))).scalar_one()
        assert count == 1

    async def test_init_short_password(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/v1/auth/init",
            json={"name": "Admin", "email": "admin@example.com", "password": "short"},
        )
        assert response.status_code == 422


class TestSessionToken:
    async def test_token_carries_session_data(self, async_client: AsyncClient, test_user: User):
        response = await async_client.post(
            "/api/v1/auth/login", json={"email": test_user.email, "password": TEST_PASSWORD}
        )
        payload = system_config.session.get(response.json()["session_token"])
        assert payload.sub == test_user.id
        assert payload.list_key == "User"
        assert payload.data["name"] == "Test User"
        assert "created_at" in payload.data
