"""
Database Models
Import all models here for Alembic migrations
"""

from eventledger.models.user import User
from eventledger.models.event import Event
from eventledger.models.registration import Registration, Attendance

__all__ = [
    "User",
    "Event",
    "Registration",
    "Attendance",
]
