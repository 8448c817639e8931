import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eduwise.api.v1.attendance.router import router as attendance_router
from eduwise.api.v1.auth.router import router as auth_router
from eduwise.api.v1.classes.classes_router import router as classes_router
from eduwise.api.v1.courses.router import router as courses_router
from eduwise.api.v1.grades.router import router as grades_router
from eduwise.api.v1.notifications.router import router as notifications_router
from eduwise.api.v1.registrations.router import router as registrations_router
from eduwise.api.v1.sections.sections_router import router as sections_router
from eduwise.api.v1.students.router import router as students_router
from eduwise.api.v1.teachers.router import router as teachers_router
from eduwise.api.v1.terms.router import router as terms_router
from eduwise.api.v1.users.router import router as users_router
from eduwise.core.config import settings
from eduwise.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title=f"{settings.school_name} Management Backend")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers. Sections live under /classes/sections, so they go before classes/{class_id}.
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(registrations_router)
    app.include_router(students_router)
    app.include_router(teachers_router)
    app.include_router(courses_router)
    app.include_router(terms_router)
    app.include_router(sections_router)
    app.include_router(classes_router)
    app.include_router(attendance_router)
    app.include_router(grades_router)
    app.include_router(notifications_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    logger.info("%s API ready", settings.school_name)
    return app


app = create_app()
