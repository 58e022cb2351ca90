"""
Event Model
Events with capacity and ownership
"""

from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import relationship
import uuid
from eventledger.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    # Fixed-width ISO-8601 string, so lexicographic order is chronological
    date = Column(String(19), nullable=False, index=True)
    location = Column(String(255), nullable=True)
    capacity = Column(Integer, nullable=False)
    category = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    owner = relationship("User", backref="events")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_events_capacity_positive"),
    )
