from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from eduwise.api.v1.registrations.service import split_name
from eduwise.core.models import AuditLog, Student

APPLICATION = {
    "applicant_name": "Jane Roe",
    "dob": "2010-04-12",
    "gender": "Female",
    "phone": "555-0199",
    "email": "jane.roe@example.com",
    "desired_class": "Grade 9",
    "subjects_selected": ["Mathematics", "Biology"],
    "report_card_url": "https://files.example.com/jane/report-card.pdf",
}


async def _submit(client: AsyncClient, **overrides) -> dict:
    response = await client.post("/api/v1/registrations", json={**APPLICATION, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def test_split_name() -> None:
    assert split_name("Jane Roe") == ("Jane", "Roe")
    assert split_name("  Mary Ann  van Dyke ") == ("Mary", "Ann  van Dyke")
    assert split_name("Cher") == ("Cher", "")


@pytest.mark.asyncio
async def test_public_submission_needs_no_token(client: AsyncClient) -> None:
    reg = await _submit(client)
    assert reg["status"] == "pending"
    assert reg["student_id"] is None
    assert reg["subjects_selected"] == ["Mathematics", "Biology"]
    assert reg["welcome_email_sent"] is False


@pytest.mark.asyncio
async def test_submission_validates_fields(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/registrations",
        json={**APPLICATION, "email": "not-an-email", "dob": "not-a-date"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_accept_registration_end_to_end(client: AsyncClient, admin_headers, mailer, db_session) -> None:
    reg = await _submit(client)

    listing = await client.get("/api/v1/registrations", headers=admin_headers)
    assert listing.status_code == 200
    entry = next(r for r in listing.json()["data"] if r["id"] == reg["id"])
    assert entry["status"] == "pending"

    response = await client.put(
        f"/api/v1/registrations/{reg['id']}/status",
        json={"status": "accepted", "admin_note": "Strong report card"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    accepted = response.json()
    assert accepted["status"] == "accepted"
    assert accepted["admin_note"] == "Strong report card"
    assert accepted["student_id"] is not None
    assert accepted["reviewed_at"] is not None
    assert accepted["welcome_email_sent"] is True

    students = await client.get("/api/v1/students", params={"name": "Jane Roe"}, headers=admin_headers)
    found = students.json()["data"]
    assert len(found) == 1
    assert found[0]["id"] == accepted["student_id"]
    assert found[0]["first_name"] == "Jane"
    assert found[0]["last_name"] == "Roe"
    assert found[0]["grade_level"] == "Grade 9"
    assert found[0]["registration_id"] == reg["id"]

    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == "jane.roe@example.com"
    assert accepted["student_id"] in mailer.sent[0]["text"]

    history = await client.get(f"/api/v1/registrations/{reg['id']}/history", headers=admin_headers)
    assert [h["action"] for h in history.json()] == ["registration_submitted", "registration_accepted"]


@pytest.mark.asyncio
async def test_repeated_accept_creates_one_student(client: AsyncClient, admin_headers, mailer, db_session) -> None:
    reg = await _submit(client)
    url = f"/api/v1/registrations/{reg['id']}/status"

    first = await client.put(url, json={"status": "accepted"}, headers=admin_headers)
    second = await client.put(url, json={"status": "accepted"}, headers=admin_headers)
    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["student_id"] == first.json()["student_id"]

    count = await db_session.execute(select(func.count(Student.id)).where(Student.registration_id == UUID(reg["id"])))
    assert count.scalar_one() == 1
    assert len(mailer.sent) == 1


@pytest.mark.asyncio
async def test_terminal_status_cannot_change(client: AsyncClient, admin_headers) -> None:
    reg = await _submit(client)
    url = f"/api/v1/registrations/{reg['id']}/status"

    rejected = await client.put(url, json={"status": "rejected", "admin_note": "Class full"}, headers=admin_headers)
    assert rejected.status_code == 200
    assert rejected.json()["student_id"] is None

    flip = await client.put(url, json={"status": "accepted"}, headers=admin_headers)
    assert flip.status_code == 409

    reopen = await client.put(url, json={"status": "pending"}, headers=admin_headers)
    assert reopen.status_code == 409


@pytest.mark.asyncio
async def test_email_failure_does_not_undo_acceptance(client: AsyncClient, admin_headers, mailer) -> None:
    mailer.fail = True
    reg = await _submit(client)

    response = await client.put(
        f"/api/v1/registrations/{reg['id']}/status", json={"status": "accepted"}, headers=admin_headers
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "accepted"
    assert body["student_id"] is not None
    assert body["welcome_email_sent"] is False

    student = await client.get(f"/api/v1/students/{body['student_id']}", headers=admin_headers)
    assert student.status_code == 200


@pytest.mark.asyncio
async def test_accept_without_email_skips_welcome(client: AsyncClient, admin_headers, mailer) -> None:
    reg = await _submit(client, email=None)
    response = await client.put(
        f"/api/v1/registrations/{reg['id']}/status", json={"status": "accepted"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["welcome_email_sent"] is False
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_acceptance_is_audited(client: AsyncClient, admin_headers, admin_user, db_session) -> None:
    reg = await _submit(client)
    response = await client.put(
        f"/api/v1/registrations/{reg['id']}/status", json={"status": "accepted"}, headers=admin_headers
    )
    student_id = response.json()["student_id"]

    result = await db_session.execute(select(AuditLog).where(AuditLog.entity_type == "student"))
    entries = result.scalars().all()
    assert len(entries) == 1
    assert str(entries[0].entity_id) == student_id
    assert entries[0].action == "student_created"
    assert entries[0].performed_by == admin_user.id
    assert entries[0].performed_by_role == "ADMIN"


@pytest.mark.asyncio
async def test_registrations_hidden_from_teachers(client: AsyncClient, make_user, headers_for) -> None:
    teacher = await make_user("TEACHER")
    response = await client.get("/api/v1/registrations", headers=headers_for(teacher))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_registrar_reviews_registrations(client: AsyncClient, make_user, headers_for) -> None:
    registrar = await make_user("REGISTRAR")
    reg = await _submit(client)
    response = await client.put(
        f"/api/v1/registrations/{reg['id']}/status",
        json={"status": "rejected"},
        headers=headers_for(registrar),
    )
    assert response.status_code == 200
    assert response.json()["reviewed_by"] == str(registrar.id)


@pytest.mark.asyncio
async def test_list_filters_by_status(client: AsyncClient, admin_headers) -> None:
    first = await _submit(client, applicant_name="Ada Lovelace")
    await _submit(client, applicant_name="Grace Hopper")
    await client.put(f"/api/v1/registrations/{first['id']}/status", json={"status": "rejected"}, headers=admin_headers)

    pending = await client.get("/api/v1/registrations", params={"status": "pending"}, headers=admin_headers)
    assert [r["applicant_name"] for r in pending.json()["data"]] == ["Grace Hopper"]

    by_name = await client.get("/api/v1/registrations", params={"name": "ada"}, headers=admin_headers)
    assert by_name.json()["meta"]["total"] == 1


@pytest.mark.asyncio
async def test_unknown_registration(client: AsyncClient, admin_headers) -> None:
    missing = "00000000-0000-0000-0000-000000000000"
    assert (await client.get(f"/api/v1/registrations/{missing}", headers=admin_headers)).status_code == 404
    response = await client.put(
        f"/api/v1/registrations/{missing}/status", json={"status": "accepted"}, headers=admin_headers
    )
    assert response.status_code == 404
