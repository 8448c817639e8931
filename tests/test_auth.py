import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, make_user) -> None:
    user = await make_user("REGISTRAR", email="registrar@example.com", password="Secret123")

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "Registrar@Example.com", "password": "Secret123"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["user"]["id"] == str(user.id)
    assert data["user"]["role"] == "REGISTRAR"
    assert "issued_at" in data


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, make_user) -> None:
    await make_user("ADMIN", email="admin@example.com", password="Secret123")

    response = await client.post("/api/v1/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient) -> None:
    response = await client.post("/api/v1/auth/login", json={"email": "ghost@example.com", "password": "x"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_inactive_user(client: AsyncClient, make_user) -> None:
    await make_user("TEACHER", email="gone@example.com", password="Secret123", status="INACTIVE")

    response = await client.post("/api/v1/auth/login", json={"email": "gone@example.com", "password": "Secret123"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_oauth_form_login(client: AsyncClient, make_user) -> None:
    await make_user("ADMIN", email="form@example.com", password="Secret123")

    response = await client.post(
        "/api/v1/auth/login-oauth",
        data={"username": "form@example.com", "password": "Secret123"},
    )
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_me_returns_current_user(client: AsyncClient, admin_user, admin_headers) -> None:
    response = await client.get("/api/v1/auth/me", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == admin_user.email
    assert data["name"] == "School Admin"


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient) -> None:
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token_rejected(client: AsyncClient) -> None:
    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_deactivated_user_token_stops_working(client: AsyncClient, make_user, headers_for, admin_headers) -> None:
    teacher = await make_user("TEACHER")
    headers = headers_for(teacher)
    assert (await client.get("/api/v1/auth/me", headers=headers)).status_code == 200

    response = await client.patch(f"/api/v1/users/{teacher.id}", json={"status": "INACTIVE"}, headers=admin_headers)
    assert response.status_code == 200

    assert (await client.get("/api/v1/auth/me", headers=headers)).status_code == 401
