import pytest
from httpx import AsyncClient


@pytest.fixture()
async def roster(school) -> dict:
    course = await school.course()
    term = await school.term()
    klass = await school.school_class(course, term)
    ann = await school.student("Ann", "Adams")
    ben = await school.student("Ben", "Baker")
    await school.enroll(klass, ann, ben)
    return {"class": klass, "ann": ann, "ben": ben}


async def _mark(client: AsyncClient, headers, roster, on: str, **statuses):
    return await client.post(
        "/api/v1/attendance",
        json={
            "class_id": roster["class"]["id"],
            "date": on,
            "records": [{"student_id": roster[name]["id"], "status": value} for name, value in statuses.items()],
        },
        headers=headers,
    )


@pytest.mark.asyncio
async def test_mark_attendance(client: AsyncClient, admin_headers, admin_user, roster) -> None:
    response = await _mark(client, admin_headers, roster, "2024-09-02", ann="present", ben="tardy")
    assert response.status_code == 200
    body = response.json()
    assert body["recorded"] == 2
    assert {r["status"] for r in body["records"]} == {"present", "tardy"}
    assert body["records"][0]["recorded_by"] == str(admin_user.id)


@pytest.mark.asyncio
async def test_remarking_overwrites(client: AsyncClient, admin_headers, roster) -> None:
    await _mark(client, admin_headers, roster, "2024-09-02", ann="present")
    await _mark(client, admin_headers, roster, "2024-09-02", ann="excused")

    listing = await client.get(
        "/api/v1/attendance",
        params={"class_id": roster["class"]["id"], "date": "2024-09-02"},
        headers=admin_headers,
    )
    records = listing.json()["data"]
    assert len(records) == 1
    assert records[0]["status"] == "excused"


@pytest.mark.asyncio
async def test_student_must_be_enrolled(client: AsyncClient, admin_headers, school, roster) -> None:
    outsider = await school.student("Out", "Sider")
    response = await client.post(
        "/api/v1/attendance",
        json={
            "class_id": roster["class"]["id"],
            "date": "2024-09-02",
            "records": [{"student_id": outsider["id"], "status": "present"}],
        },
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert "not enrolled" in response.json()["detail"]


@pytest.mark.asyncio
async def test_duplicate_student_in_batch(client: AsyncClient, admin_headers, roster) -> None:
    ann = roster["ann"]["id"]
    response = await client.post(
        "/api/v1/attendance",
        json={
            "class_id": roster["class"]["id"],
            "date": "2024-09-02",
            "records": [{"student_id": ann, "status": "present"}, {"student_id": ann, "status": "absent"}],
        },
        headers=admin_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_statistics(client: AsyncClient, admin_headers, roster) -> None:
    await _mark(client, admin_headers, roster, "2024-09-02", ann="present")
    await _mark(client, admin_headers, roster, "2024-09-03", ann="present")
    await _mark(client, admin_headers, roster, "2024-09-04", ann="absent")

    response = await client.get(f"/api/v1/attendance/statistics/student/{roster['ann']['id']}", headers=admin_headers)
    assert response.status_code == 200
    stats = response.json()
    assert stats["total"] == 3
    assert stats["counts"]["present"] == 2
    assert stats["counts"]["absent"] == 1
    assert stats["counts"]["tardy"] == 0
    assert stats["attendance_rate"] == 66.67

    windowed = await client.get(
        f"/api/v1/attendance/statistics/student/{roster['ann']['id']}",
        params={"start_date": "2024-09-04"},
        headers=admin_headers,
    )
    assert windowed.json()["attendance_rate"] == 0.0


@pytest.mark.asyncio
async def test_statistics_without_records(client: AsyncClient, admin_headers, roster) -> None:
    response = await client.get(f"/api/v1/attendance/statistics/student/{roster['ben']['id']}", headers=admin_headers)
    assert response.json()["total"] == 0
    assert response.json()["attendance_rate"] == 0.0


@pytest.mark.asyncio
async def test_update_and_delete_record(client: AsyncClient, admin_headers, roster) -> None:
    marked = await _mark(client, admin_headers, roster, "2024-09-02", ann="absent")
    record_id = marked.json()["records"][0]["id"]

    updated = await client.patch(
        f"/api/v1/attendance/{record_id}", json={"status": "excused", "notes": "Doctor's note"}, headers=admin_headers
    )
    assert updated.status_code == 200
    assert updated.json()["status"] == "excused"
    assert updated.json()["notes"] == "Doctor's note"

    assert (await client.delete(f"/api/v1/attendance/{record_id}", headers=admin_headers)).status_code == 204
    assert (await client.get(f"/api/v1/attendance/{record_id}", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_absence_notifies_linked_student_account(
    client: AsyncClient, admin_headers, make_user, headers_for, school
) -> None:
    course = await school.course()
    term = await school.term()
    klass = await school.school_class(course, term)
    account = await make_user("STUDENT")
    student = await school.student("Nia", "Reed", user_id=str(account.id))
    await school.enroll(klass, student)

    await client.post(
        "/api/v1/attendance",
        json={"class_id": klass["id"], "date": "2024-09-02", "records": [{"student_id": student["id"], "status": "absent"}]},
        headers=admin_headers,
    )
    inbox = await client.get("/api/v1/notifications", headers=headers_for(account))
    items = inbox.json()["data"]
    assert len(items) == 1
    assert items[0]["type"] == "attendance"
    assert items[0]["link"] == f"/attendance/student/{account.id}"


@pytest.mark.asyncio
async def test_teacher_limited_to_own_classes(client: AsyncClient, make_user, headers_for, school, roster) -> None:
    account = await make_user("TEACHER")
    teacher = await school.teacher(user_id=str(account.id))
    headers = headers_for(account)

    foreign = await _mark(client, headers, roster, "2024-09-02", ann="present")
    assert foreign.status_code == 403

    course = await school.course("SCI101")
    term = await school.term("SPR25", start_date="2025-01-10", end_date="2025-05-30")
    own = await school.school_class(course, term, code="SCI101-A", teacher_id=teacher["id"])
    await school.enroll(own, roster["ann"])
    response = await client.post(
        "/api/v1/attendance",
        json={"class_id": own["id"], "date": "2025-01-13", "records": [{"student_id": roster["ann"]["id"], "status": "present"}]},
        headers=headers,
    )
    assert response.status_code == 200
