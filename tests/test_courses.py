import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_course_normalizes_code(client: AsyncClient, admin_headers) -> None:
    response = await client.post(
        "/api/v1/courses",
        json={"code": " sci101 ", "name": "General Science", "department": "Science", "credits": 1.5},
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["code"] == "SCI101"
    assert data["credits"] == 1.5
    assert data["prerequisites"] == []


@pytest.mark.asyncio
async def test_duplicate_course_code(client: AsyncClient, admin_headers, school) -> None:
    await school.course("MATH101")
    response = await client.post(
        "/api/v1/courses",
        json={"code": "math101", "name": "Again", "department": "Mathematics"},
        headers=admin_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_prerequisites_must_exist(client: AsyncClient, admin_headers, school) -> None:
    await school.course("MATH101")

    ok = await client.post(
        "/api/v1/courses",
        json={"code": "MATH201", "name": "Algebra II", "department": "Mathematics", "prerequisites": ["math101"]},
        headers=admin_headers,
    )
    assert ok.status_code == 201
    assert ok.json()["prerequisites"] == ["MATH101"]

    bad = await client.post(
        "/api/v1/courses",
        json={"code": "MATH301", "name": "Calculus", "department": "Mathematics", "prerequisites": ["NOPE9"]},
        headers=admin_headers,
    )
    assert bad.status_code == 400


@pytest.mark.asyncio
async def test_course_cannot_require_itself(client: AsyncClient, admin_headers, school) -> None:
    course = await school.course("MATH101")
    response = await client.patch(
        f"/api/v1/courses/{course['id']}", json={"prerequisites": ["MATH101"]}, headers=admin_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_grade_level_range_validated(client: AsyncClient, admin_headers) -> None:
    response = await client.post(
        "/api/v1/courses",
        json={"code": "X1", "name": "X", "department": "D", "min_grade_level": 10, "max_grade_level": 9},
        headers=admin_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_courses_filters(client: AsyncClient, admin_headers, school) -> None:
    await school.course("MATH101", min_grade_level=9, max_grade_level=10)
    await school.course("ENG101", department="English")
    await school.course("OLD100", is_active=False)

    by_dept = await client.get("/api/v1/courses", params={"department": "English"}, headers=admin_headers)
    assert [c["code"] for c in by_dept.json()["data"]] == ["ENG101"]

    active = await client.get("/api/v1/courses", params={"is_active": "false"}, headers=admin_headers)
    assert [c["code"] for c in active.json()["data"]] == ["OLD100"]

    grade_12 = await client.get("/api/v1/courses", params={"grade_level": 12}, headers=admin_headers)
    assert "MATH101" not in [c["code"] for c in grade_12.json()["data"]]

    search = await client.get("/api/v1/courses", params={"search": "eng"}, headers=admin_headers)
    assert search.json()["meta"]["total"] == 1


@pytest.mark.asyncio
async def test_get_course_by_code(client: AsyncClient, admin_headers, school) -> None:
    course = await school.course("HIST100")
    response = await client.get("/api/v1/courses/code/hist100", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["id"] == course["id"]

    missing = await client.get("/api/v1/courses/code/NONE", headers=admin_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_course_blocked_by_classes(client: AsyncClient, admin_headers, school) -> None:
    course = await school.course("MATH101")
    term = await school.term()
    await school.school_class(course, term)

    blocked = await client.delete(f"/api/v1/courses/{course['id']}", headers=admin_headers)
    assert blocked.status_code == 400

    free = await school.course("ART100")
    deleted = await client.delete(f"/api/v1/courses/{free['id']}", headers=admin_headers)
    assert deleted.status_code == 204
