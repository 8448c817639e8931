import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_teacher_with_qualifications(client: AsyncClient, admin_headers) -> None:
    response = await client.post(
        "/api/v1/teachers",
        json={
            "first_name": "Alan",
            "last_name": "Turing",
            "email": "Alan@Example.com",
            "department": "Computer Science",
            "teaching_hours": 20,
            "qualifications": {"education": ["PhD Mathematics"], "certifications": ["Teaching License"]},
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "alan@example.com"
    assert data["status"] == "Active"
    assert data["qualifications"]["education"] == ["PhD Mathematics"]
    assert data["qualifications"]["specializations"] == []


@pytest.mark.asyncio
async def test_duplicate_teacher_email(client: AsyncClient, admin_headers, school) -> None:
    await school.teacher("same@example.com")
    response = await client.post(
        "/api/v1/teachers",
        json={"first_name": "Other", "last_name": "Person", "email": "same@example.com"},
        headers=admin_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_list_teachers_filters(client: AsyncClient, admin_headers, school) -> None:
    await school.teacher("a@example.com", department="Science")
    await school.teacher("b@example.com", department="Arts", status="On Leave")

    science = await client.get("/api/v1/teachers", params={"department": "Science"}, headers=admin_headers)
    assert [t["email"] for t in science.json()["data"]] == ["a@example.com"]

    on_leave = await client.get("/api/v1/teachers", params={"status": "On Leave"}, headers=admin_headers)
    assert [t["email"] for t in on_leave.json()["data"]] == ["b@example.com"]


@pytest.mark.asyncio
async def test_update_teacher_status(client: AsyncClient, admin_headers, school) -> None:
    teacher = await school.teacher()
    response = await client.patch(
        f"/api/v1/teachers/{teacher['id']}", json={"status": "Inactive"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Inactive"


@pytest.mark.asyncio
async def test_delete_teacher_blocked_while_assigned(client: AsyncClient, admin_headers, school) -> None:
    teacher = await school.teacher()
    course = await school.course()
    term = await school.term()
    await school.school_class(course, term, teacher_id=teacher["id"])

    blocked = await client.delete(f"/api/v1/teachers/{teacher['id']}", headers=admin_headers)
    assert blocked.status_code == 400

    free = await school.teacher("free@example.com")
    assert (await client.delete(f"/api/v1/teachers/{free['id']}", headers=admin_headers)).status_code == 204


@pytest.mark.asyncio
async def test_registrar_cannot_create_teacher(client: AsyncClient, make_user, headers_for) -> None:
    registrar = await make_user("REGISTRAR")
    response = await client.post(
        "/api/v1/teachers",
        json={"first_name": "A", "last_name": "B", "email": "ab@example.com"},
        headers=headers_for(registrar),
    )
    assert response.status_code == 403
