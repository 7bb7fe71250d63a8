import pytest

from services.auth_service.service import AuthService
from shared.security import verify_access_token

ACCOUNT = {
    "email": "camille@cafe.fr",
    "password": "croissant42",
    "first_name": "Camille",
    "last_name": "Durand",
}


@pytest.fixture
async def registered(client):
    response = await client.post("/auth/register", json=ACCOUNT)
    assert response.status_code == 201, response.text
    return response.json()


class TestRegistration:

    @pytest.mark.asyncio
    async def test_register_creates_client_account(self, registered):
        assert registered["email"] == ACCOUNT["email"]
        assert registered["role"] == "CLIENT"
        assert registered["is_active"] is True
        assert "password" not in registered
        assert "hashed_password" not in registered

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client, registered):
        response = await client.post("/auth/register", json=ACCOUNT)

        assert response.status_code == 409
        assert response.json()["error"] == "Conflict"

    @pytest.mark.asyncio
    async def test_short_password(self, client):
        response = await client.post("/auth/register", json={**ACCOUNT, "password": "short"})

        assert response.status_code == 400
        assert "password" in response.json()["errors"]


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_returns_token_with_identity(self, client, registered):
        response = await client.post(
            "/auth/login", json={"email": ACCOUNT["email"], "password": ACCOUNT["password"]}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        claims = verify_access_token(body["access_token"])
        assert claims["sub"] == registered["id"]
        assert claims["role"] == "CLIENT"

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, registered):
        response = await client.post(
            "/auth/login", json={"email": ACCOUNT["email"], "password": "not-the-password"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Incorrect email or password"

    @pytest.mark.asyncio
    async def test_unknown_email(self, client):
        response = await client.post(
            "/auth/login", json={"email": "nobody@cafe.fr", "password": "whatever1"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_disabled_account(self, client, make_user):
        await make_user(
            email="gone@cafe.fr",
            hashed_password=AuthService._hash_password("whatever1"),
            is_active=False,
        )

        response = await client.post(
            "/auth/login", json={"email": "gone@cafe.fr", "password": "whatever1"}
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Account is disabled"


class TestProfile:

    @pytest.mark.asyncio
    async def test_me(self, client, registered):
        login = await client.post(
            "/auth/login", json={"email": ACCOUNT["email"], "password": ACCOUNT["password"]}
        )
        token = login.json()["access_token"]

        response = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["id"] == registered["id"]

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client):
        response = await client.get("/auth/me")

        assert response.status_code == 401
