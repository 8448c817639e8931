import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text, Uuid

from eduwise.db.session import Base


class Student(Base):
    """Enrolled student. registration_id is unique so one registration yields at most one student."""

    __tablename__ = "students"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(30), nullable=True)
    address = Column(Text, nullable=True)
    dob = Column(Date, nullable=True)
    gender = Column(String(20), nullable=True)
    grade_level = Column(String(50), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="Active")
    enrollment_date = Column(Date, nullable=False, default=lambda: datetime.utcnow().date())
    guardian_name = Column(String(255), nullable=True)
    guardian_phone = Column(String(30), nullable=True)
    guardian_email = Column(String(255), nullable=True)
    section_id = Column(Uuid, ForeignKey("sections.id", ondelete="SET NULL"), nullable=True, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    guardian_user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    registration_id = Column(Uuid, nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
