"""
User Model
Administrators and self-registering attendees
"""

from sqlalchemy import Column, String, DateTime, CheckConstraint, func
import uuid
from eventledger.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)

    # Login credentials (email is stored lowercase)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    role = Column(String(20), nullable=False, server_default="attendee")
    department = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'attendee')", name="ck_users_role"),
    )
