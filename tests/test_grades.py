import pytest
from httpx import AsyncClient


@pytest.fixture()
async def gradebook(client: AsyncClient, admin_headers, school) -> dict:
    course = await school.course()
    term = await school.term()
    klass = await school.school_class(course, term)
    ann = await school.student("Ann", "Adams")
    ben = await school.student("Ben", "Baker")
    await school.enroll(klass, ann, ben)
    quiz = await client.post(
        "/api/v1/grades/assignments",
        json={"class_id": klass["id"], "title": "Quiz 1", "type": "quiz", "max_score": 20, "weight": 1},
        headers=admin_headers,
    )
    assert quiz.status_code == 201, quiz.text
    return {"class": klass, "ann": ann, "ben": ben, "quiz": quiz.json()}


async def _record(client: AsyncClient, headers, assignment: dict, *entries: dict):
    return await client.post(
        "/api/v1/grades",
        json={"assignment_id": assignment["id"], "records": list(entries)},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_record_grades_derives_letters(client: AsyncClient, admin_headers, gradebook) -> None:
    response = await _record(
        client,
        admin_headers,
        gradebook["quiz"],
        {"student_id": gradebook["ann"]["id"], "score": 18},
        {"student_id": gradebook["ben"]["id"], "score": 11},
    )
    assert response.status_code == 200
    by_student = {r["student_id"]: r for r in response.json()["records"]}
    ann = by_student[gradebook["ann"]["id"]]
    assert ann["percentage"] == 90.0
    assert ann["letter_grade"] == "A"
    assert ann["band"] == "success"
    assert by_student[gradebook["ben"]["id"]]["letter_grade"] == "F"


@pytest.mark.asyncio
async def test_missing_work_has_no_score(client: AsyncClient, admin_headers, gradebook) -> None:
    response = await _record(
        client, admin_headers, gradebook["quiz"], {"student_id": gradebook["ann"]["id"], "score": 15, "status": "missing"}
    )
    record = response.json()["records"][0]
    assert record["score"] is None
    assert record["status"] == "missing"
    assert record["letter_grade"] is None


@pytest.mark.asyncio
async def test_score_above_max_rejects_whole_batch(client: AsyncClient, admin_headers, gradebook) -> None:
    response = await _record(
        client,
        admin_headers,
        gradebook["quiz"],
        {"student_id": gradebook["ann"]["id"], "score": 19},
        {"student_id": gradebook["ben"]["id"], "score": 25},
    )
    assert response.status_code == 400

    listing = await client.get("/api/v1/grades", params={"assignment_id": gradebook["quiz"]["id"]}, headers=admin_headers)
    assert listing.json()["meta"]["total"] == 0


@pytest.mark.asyncio
async def test_unenrolled_student_rejected(client: AsyncClient, admin_headers, school, gradebook) -> None:
    outsider = await school.student("Out", "Sider")
    response = await _record(client, admin_headers, gradebook["quiz"], {"student_id": outsider["id"], "score": 10})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_entering_score_marks_missing_work_submitted(client: AsyncClient, admin_headers, gradebook) -> None:
    recorded = await _record(
        client, admin_headers, gradebook["quiz"], {"student_id": gradebook["ann"]["id"], "status": "missing"}
    )
    grade_id = recorded.json()["records"][0]["id"]

    response = await client.patch(f"/api/v1/grades/{grade_id}", json={"score": 16}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "submitted"
    assert response.json()["letter_grade"] == "B"


@pytest.mark.asyncio
async def test_max_score_cannot_drop_below_recorded(client: AsyncClient, admin_headers, gradebook) -> None:
    await _record(client, admin_headers, gradebook["quiz"], {"student_id": gradebook["ann"]["id"], "score": 18})
    url = f"/api/v1/grades/assignments/{gradebook['quiz']['id']}"

    assert (await client.patch(url, json={"max_score": 15}, headers=admin_headers)).status_code == 400

    raised = await client.patch(url, json={"max_score": 40}, headers=admin_headers)
    assert raised.status_code == 200
    listing = await client.get("/api/v1/grades", params={"student_id": gradebook["ann"]["id"]}, headers=admin_headers)
    assert listing.json()["data"][0]["letter_grade"] == "F"


@pytest.mark.asyncio
async def test_statistics(client: AsyncClient, admin_headers, gradebook) -> None:
    exam = (
        await client.post(
            "/api/v1/grades/assignments",
            json={"class_id": gradebook["class"]["id"], "title": "Midterm", "type": "exam", "max_score": 100, "weight": 3},
            headers=admin_headers,
        )
    ).json()
    ann = gradebook["ann"]["id"]
    await _record(client, admin_headers, gradebook["quiz"], {"student_id": ann, "score": 20})
    await _record(client, admin_headers, exam, {"student_id": ann, "score": 80})

    response = await client.get(
        f"/api/v1/grades/statistics/student/{ann}/class/{gradebook['class']['id']}", headers=admin_headers
    )
    assert response.status_code == 200
    stats = response.json()
    assert stats["total_items"] == 2
    assert stats["completed_items"] == 2
    assert stats["average_score"] == 90.0
    assert stats["weighted_average"] == 85.0
    assert stats["letter_grade"] == "B"
    assert stats["category_breakdown"]["quiz"] == {"count": 1, "average": 100.0}
    assert stats["category_breakdown"]["exam"] == {"count": 1, "average": 80.0}


@pytest.mark.asyncio
async def test_grade_notifies_linked_guardian(client: AsyncClient, admin_headers, make_user, headers_for, school) -> None:
    course = await school.course()
    term = await school.term()
    klass = await school.school_class(course, term)
    parent = await make_user("PARENT")
    student = await school.student("Kim", "Park", guardian_user_id=str(parent.id))
    await school.enroll(klass, student)
    hw = (
        await client.post(
            "/api/v1/grades/assignments",
            json={"class_id": klass["id"], "title": "Homework 1", "type": "homework"},
            headers=admin_headers,
        )
    ).json()

    await _record(client, admin_headers, hw, {"student_id": student["id"], "score": 95})

    inbox = (await client.get("/api/v1/notifications", headers=headers_for(parent))).json()["data"]
    assert [n["type"] for n in inbox] == ["grade"]


@pytest.mark.asyncio
async def test_teacher_cannot_grade_other_class(client: AsyncClient, make_user, headers_for, gradebook) -> None:
    account = await make_user("TEACHER")
    response = await _record(
        client, headers_for(account), gradebook["quiz"], {"student_id": gradebook["ann"]["id"], "score": 10}
    )
    assert response.status_code == 403
