import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, String, Text, UniqueConstraint, Uuid

from eduwise.db.session import Base


class GradeRecord(Base):
    """Score of one student on one assignment. score is null for missing/excused work."""

    __tablename__ = "grade_records"
    __table_args__ = (
        UniqueConstraint("student_id", "assignment_id", name="uq_grade_student_assignment"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    assignment_id = Column(Uuid, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Float, nullable=True)
    status = Column(String(20), nullable=False, default="submitted")
    letter_grade = Column(String(2), nullable=True)
    comments = Column(Text, nullable=True)
    graded_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
