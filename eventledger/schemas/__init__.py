"""
Pydantic schemas for request/response validation
"""

from eventledger.schemas.auth import (
    SignupRequest,
    LoginRequest,
    UserResponse,
    AuthResponse
)
from eventledger.schemas.event import (
    CreateEventRequest,
    EventResponse,
    EventDetailResponse,
    ParticipantResponse
)

__all__ = [
    "SignupRequest",
    "LoginRequest",
    "UserResponse",
    "AuthResponse",
    "CreateEventRequest",
    "EventResponse",
    "EventDetailResponse",
    "ParticipantResponse",
]
