"""
Registration and Attendance Models
One registration per (event, email); at most one attendance mark per registration
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
import uuid
from eventledger.database import Base


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    # Set for account registrations; cleared when the account is deleted
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Attendee key (lowercase email) plus display data
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    department = Column(String(100), nullable=True)

    registered_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    event = relationship("Event", backref="registrations")
    user = relationship("User", backref="registrations")

    __table_args__ = (
        UniqueConstraint("event_id", "email", name="uq_registrations_event_email"),
    )


class Attendance(Base):
    __tablename__ = "attendance"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    registration_id = Column(
        String(36),
        ForeignKey("registrations.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)

    attended_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    registration = relationship("Registration", backref="attendance")
    event = relationship("Event", backref="attendance")
