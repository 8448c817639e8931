import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, String, Text, Uuid

from eduwise.db.session import Base


class Term(Base):
    """Academic term. At most one term has is_current = true; the service clears the flag elsewhere."""

    __tablename__ = "terms"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    code = Column(String(20), nullable=False, unique=True)
    type = Column(String(20), nullable=False, default="semester")
    academic_year = Column(String(20), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    registration_start = Column(Date, nullable=True)
    registration_end = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_current = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
