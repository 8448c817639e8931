import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_admin_creates_user_who_can_log_in(client: AsyncClient, admin_headers) -> None:
    response = await client.post(
        "/api/v1/users",
        json={"full_name": "Rita Registrar", "email": "Rita@Example.com", "password": "Welcome123", "role": "REGISTRAR"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "rita@example.com"
    assert data["role"] == "REGISTRAR"
    assert data["status"] == "ACTIVE"
    assert "password_hash" not in data

    login = await client.post("/api/v1/auth/login", json={"email": "rita@example.com", "password": "Welcome123"})
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(client: AsyncClient, admin_headers, admin_user) -> None:
    response = await client.post(
        "/api/v1/users",
        json={"full_name": "Copy", "email": admin_user.email, "password": "Welcome123", "role": "STAFF"},
        headers=admin_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_list_users_filters_by_role(client: AsyncClient, admin_headers, make_user) -> None:
    await make_user("TEACHER")
    await make_user("TEACHER")
    await make_user("PARENT")

    response = await client.get("/api/v1/users", params={"role": "TEACHER"}, headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["meta"]["total"] == 2
    assert {u["role"] for u in body["data"]} == {"TEACHER"}


@pytest.mark.asyncio
async def test_admin_cannot_deactivate_self(client: AsyncClient, admin_headers, admin_user) -> None:
    response = await client.patch(
        f"/api/v1/users/{admin_user.id}", json={"status": "INACTIVE"}, headers=admin_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_unknown_user(client: AsyncClient, admin_headers) -> None:
    response = await client.get("/api/v1/users/00000000-0000-0000-0000-000000000000", headers=admin_headers)
    assert response.status_code == 404
