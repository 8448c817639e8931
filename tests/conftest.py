import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.pop("SMTP_HOST", None)

from datetime import date
from typing import AsyncGenerator, Dict, List, Optional
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from eduwise.auth.models import User
from eduwise.auth.security import hash_password, token_for_user
from eduwise.core.config import settings
from eduwise.core.exceptions import MailDeliveryError
from eduwise.core.mailer import Mailer, get_mailer
from eduwise.db.session import create_tables, get_db
from eduwise.main import app


class RecordingMailer(Mailer):
    """Keeps outgoing mail in memory instead of talking to SMTP."""

    def __init__(self, fail: bool = False) -> None:
        super().__init__(settings)
        self.fail = fail
        self.sent: List[Dict[str, Optional[str]]] = []

    async def send(self, to_email: str, subject: str, text: str, html: Optional[str] = None) -> bool:
        if self.fail:
            raise MailDeliveryError("SMTP server unavailable")
        self.sent.append({"to": to_email, "subject": subject, "text": text, "html": html})
        return True


@pytest.fixture()
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False, future=True)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Session for test setup; each request gets its own session on the same database."""
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with session_factory() as session:
        yield session
    app.dependency_overrides.clear()


@pytest.fixture()
def mailer(db_session) -> RecordingMailer:
    recording = RecordingMailer()
    app.dependency_overrides[get_mailer] = lambda: recording
    return recording


@pytest.fixture()
async def client(db_session: AsyncSession, mailer: RecordingMailer) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_user(db_session: AsyncSession):
    async def _make(
        role: str = "ADMIN",
        email: Optional[str] = None,
        password: str = "Password123",
        status: str = "ACTIVE",
        full_name: Optional[str] = None,
    ) -> User:
        user = User(
            full_name=full_name or f"{role.title()} User",
            email=email or f"{role.lower()}-{uuid4().hex[:8]}@example.com",
            password_hash=hash_password(password),
            role=role,
            status=status,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def headers_for():
    def _headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token_for_user(user)}"}

    return _headers


@pytest.fixture()
async def admin_user(make_user) -> User:
    return await make_user("ADMIN", full_name="School Admin")


@pytest.fixture()
def admin_headers(admin_user, headers_for) -> Dict[str, str]:
    return headers_for(admin_user)


@pytest.fixture()
def school(client: AsyncClient, admin_headers: Dict[str, str]):
    """Helpers that create records through the API as the admin."""

    class School:
        async def course(self, code: str = "MATH101", **extra) -> dict:
            payload = {"code": code, "name": f"Course {code}", "department": "Mathematics", **extra}
            response = await client.post("/api/v1/courses", json=payload, headers=admin_headers)
            assert response.status_code == 201, response.text
            return response.json()

        async def term(self, code: str = "FALL24", **extra) -> dict:
            payload = {
                "name": f"Term {code}",
                "code": code,
                "academic_year": "2024-2025",
                "start_date": "2024-09-01",
                "end_date": "2024-12-20",
                **extra,
            }
            response = await client.post("/api/v1/terms", json=payload, headers=admin_headers)
            assert response.status_code == 201, response.text
            return response.json()

        async def school_class(self, course: dict, term: dict, code: str = "MATH101-A", **extra) -> dict:
            payload = {
                "code": code,
                "name": f"{course['name']} A",
                "course_id": course["id"],
                "term_id": term["id"],
                **extra,
            }
            response = await client.post("/api/v1/classes", json=payload, headers=admin_headers)
            assert response.status_code == 201, response.text
            return response.json()

        async def student(self, first_name: str = "Sam", last_name: str = "Lee", **extra) -> dict:
            payload = {"first_name": first_name, "last_name": last_name, "grade_level": "Grade 9", **extra}
            response = await client.post("/api/v1/students", json=payload, headers=admin_headers)
            assert response.status_code == 201, response.text
            return response.json()

        async def teacher(self, email: str = "teacher@example.com", **extra) -> dict:
            payload = {"first_name": "Tina", "last_name": "Brown", "email": email, "department": "Mathematics", **extra}
            response = await client.post("/api/v1/teachers", json=payload, headers=admin_headers)
            assert response.status_code == 201, response.text
            return response.json()

        async def enroll(self, klass: dict, *students: dict):
            response = await client.post(
                f"/api/v1/classes/{klass['id']}/enroll",
                json={"student_ids": [s["id"] for s in students]},
                headers=admin_headers,
            )
            return response

    return School()


@pytest.fixture()
def today() -> date:
    return date.today()
