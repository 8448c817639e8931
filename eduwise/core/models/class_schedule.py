import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Time, Uuid

from eduwise.db.session import Base


class ClassSchedule(Base):
    """Weekly meeting slot of a class. Room and building fall back to the class's when null."""

    __tablename__ = "class_schedules"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    class_id = Column(Uuid, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(String(10), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    room = Column(String(50), nullable=True)
    building = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
