import pytest
from httpx import AsyncClient


@pytest.fixture()
async def klass(school) -> dict:
    course = await school.course()
    term = await school.term()
    return await school.school_class(course, term)


@pytest.mark.asyncio
async def test_create_section(client: AsyncClient, admin_headers, klass) -> None:
    response = await client.post(
        "/api/v1/classes/sections",
        json={"class_id": klass["id"], "name": "A", "capacity": 25},
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "A"
    assert data["enrolled_students"] == 0
    assert data["status"] == "active"


@pytest.mark.asyncio
async def test_section_capacity_limit(client: AsyncClient, admin_headers, klass) -> None:
    response = await client.post(
        "/api/v1/classes/sections",
        json={"class_id": klass["id"], "name": "Huge", "capacity": 101},
        headers=admin_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_bulk_create_is_all_or_nothing(client: AsyncClient, admin_headers, klass) -> None:
    ok = await client.post(
        "/api/v1/classes/sections/bulk",
        json={"class_id": klass["id"], "sections": [{"name": "A"}, {"name": "B"}]},
        headers=admin_headers,
    )
    assert ok.status_code == 201
    assert [s["name"] for s in ok.json()] == ["A", "B"]

    clash = await client.post(
        "/api/v1/classes/sections/bulk",
        json={"class_id": klass["id"], "sections": [{"name": "C"}, {"name": "A"}]},
        headers=admin_headers,
    )
    assert clash.status_code == 409

    listing = await client.get("/api/v1/classes/sections", params={"class_id": klass["id"]}, headers=admin_headers)
    assert [s["name"] for s in listing.json()["data"]] == ["A", "B"]


@pytest.mark.asyncio
async def test_enrolled_students_counted_and_delete_blocked(client: AsyncClient, admin_headers, school, klass) -> None:
    section = (
        await client.post(
            "/api/v1/classes/sections",
            json={"class_id": klass["id"], "name": "A", "capacity": 2},
            headers=admin_headers,
        )
    ).json()
    student = await school.student(section_id=section["id"])

    detail = await client.get(f"/api/v1/classes/sections/{section['id']}", headers=admin_headers)
    assert detail.json()["enrolled_students"] == 1

    blocked = await client.delete(f"/api/v1/classes/sections/{section['id']}", headers=admin_headers)
    assert blocked.status_code == 400

    await client.patch(f"/api/v1/students/{student['id']}", json={"section_id": None}, headers=admin_headers)
    deleted = await client.delete(f"/api/v1/classes/sections/{section['id']}", headers=admin_headers)
    assert deleted.status_code == 204


@pytest.mark.asyncio
async def test_class_with_sections_cannot_be_deleted(client: AsyncClient, admin_headers, klass) -> None:
    await client.post(
        "/api/v1/classes/sections",
        json={"class_id": klass["id"], "name": "A"},
        headers=admin_headers,
    )
    response = await client.delete(f"/api/v1/classes/{klass['id']}", headers=admin_headers)
    assert response.status_code == 400
