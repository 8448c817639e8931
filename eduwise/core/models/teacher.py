import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, Integer, String, Uuid

from eduwise.db.session import Base


def _empty_qualifications() -> dict:
    return {"education": [], "certifications": [], "specializations": []}


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(30), nullable=True)
    department = Column(String(100), nullable=True, index=True)
    position = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default="Active")
    hire_date = Column(Date, nullable=True)
    teaching_hours = Column(Integer, nullable=False, default=0)
    qualifications = Column(JSON, nullable=False, default=_empty_qualifications)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
