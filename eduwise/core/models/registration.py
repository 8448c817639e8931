"""Public registration applications. Accepting one creates exactly one student."""
import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, ForeignKey, String, Text, Uuid

from eduwise.db.session import Base


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    applicant_name = Column(String(255), nullable=False)
    dob = Column(Date, nullable=False)
    gender = Column(String(20), nullable=True)
    phone = Column(String(30), nullable=False)
    email = Column(String(255), nullable=True)
    # Grade level applied for, e.g. "Grade 9"; becomes the student's grade_level.
    desired_class = Column(String(100), nullable=False)
    desired_section_id = Column(Uuid, ForeignKey("sections.id", ondelete="SET NULL"), nullable=True)
    subjects_selected = Column(JSON, nullable=False, default=list)
    report_card_url = Column(String(500), nullable=True)
    application_letter_url = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    admin_note = Column(Text, nullable=True)
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="SET NULL"), nullable=True)
    welcome_email_sent = Column(Boolean, nullable=False, default=False)
    reviewed_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    submitted_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
