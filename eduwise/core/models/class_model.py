"""Class offerings. Model named SchoolClass to avoid Python 'class' keyword."""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid

from eduwise.db.session import Base


class SchoolClass(Base):
    """A course offered in a term. enrolled_count mirrors the number of enrollment rows."""

    __tablename__ = "classes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(String(50), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False, index=True)
    term_id = Column(Uuid, ForeignKey("terms.id", ondelete="RESTRICT"), nullable=False, index=True)
    section_label = Column(String(10), nullable=True)
    teacher_id = Column(Uuid, ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True, index=True)
    room = Column(String(50), nullable=True)
    building = Column(String(100), nullable=True)
    capacity = Column(Integer, nullable=False, default=30)
    enrolled_count = Column(Integer, nullable=False, default=0)
    waitlist_count = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
