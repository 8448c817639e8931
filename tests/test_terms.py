import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_term(client: AsyncClient, admin_headers) -> None:
    response = await client.post(
        "/api/v1/terms",
        json={
            "name": "Fall 2024",
            "code": "fall24",
            "type": "semester",
            "academic_year": "2024-2025",
            "start_date": "2024-09-01",
            "end_date": "2024-12-20",
            "registration_start": "2024-07-01",
            "registration_end": "2024-08-25",
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["code"] == "FALL24"
    assert data["is_current"] is False


@pytest.mark.asyncio
async def test_end_date_must_follow_start(client: AsyncClient, admin_headers) -> None:
    response = await client.post(
        "/api/v1/terms",
        json={"name": "Bad", "code": "BAD1", "academic_year": "2024-2025", "start_date": "2024-12-01", "end_date": "2024-09-01"},
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_registration_window_must_close_before_start(client: AsyncClient, admin_headers) -> None:
    response = await client.post(
        "/api/v1/terms",
        json={
            "name": "Spring",
            "code": "SPR25",
            "academic_year": "2024-2025",
            "start_date": "2025-01-10",
            "end_date": "2025-05-30",
            "registration_start": "2024-12-01",
            "registration_end": "2025-01-20",
        },
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert "Registration must close" in response.json()["detail"]


@pytest.mark.asyncio
async def test_only_one_current_term(client: AsyncClient, admin_headers, school) -> None:
    first = await school.term("FALL24", is_current=True)
    second = await school.term("SPR25", start_date="2025-01-10", end_date="2025-05-30", is_current=True)

    current = await client.get("/api/v1/terms/current", headers=admin_headers)
    assert current.status_code == 200
    assert current.json()["id"] == second["id"]

    refreshed = await client.get(f"/api/v1/terms/{first['id']}", headers=admin_headers)
    assert refreshed.json()["is_current"] is False

    switched = await client.post(f"/api/v1/terms/{first['id']}/set-current", headers=admin_headers)
    assert switched.status_code == 200
    listing = await client.get("/api/v1/terms", params={"is_current": "true"}, headers=admin_headers)
    assert [t["id"] for t in listing.json()["data"]] == [first["id"]]


@pytest.mark.asyncio
async def test_no_current_term(client: AsyncClient, admin_headers, school) -> None:
    await school.term()
    response = await client.get("/api/v1/terms/current", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "No current term found"


@pytest.mark.asyncio
async def test_duplicate_term_code(client: AsyncClient, admin_headers, school) -> None:
    await school.term("FALL24")
    response = await client.post(
        "/api/v1/terms",
        json={"name": "Again", "code": "fall24", "academic_year": "2024-2025", "start_date": "2024-09-01", "end_date": "2024-12-20"},
        headers=admin_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_delete_term_blocked_by_classes(client: AsyncClient, admin_headers, school) -> None:
    course = await school.course()
    term = await school.term()
    await school.school_class(course, term)

    response = await client.delete(f"/api/v1/terms/{term['id']}", headers=admin_headers)
    assert response.status_code == 400

    empty = await school.term("EMPTY1")
    assert (await client.delete(f"/api/v1/terms/{empty['id']}", headers=admin_headers)).status_code == 204
