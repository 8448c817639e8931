import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String, Text, Uuid

from eduwise.db.session import Base


class User(Base):
    """Login account. The role decides capabilities; see eduwise.auth.rbac."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    # ADMIN, TEACHER, STUDENT, PARENT, REGISTRAR, STAFF
    role = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="ACTIVE")
    # Null until the user saves preferences; defaults are applied on read.
    notification_preferences = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
