"""
Event Request/Response Models
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class CreateEventRequest(BaseModel):
    """
    Request to create an event

    `capacity` and `date` are checked by the event service so that bad
    values come back as 400 validation errors.
    """
    title: str = Field(..., min_length=1, max_length=200)
    date: str = Field(..., description="ISO-8601 date or datetime")
    location: Optional[str] = Field(default=None, max_length=255)
    capacity: int = Field(..., description="Maximum number of registrations (positive)")
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=50, description="e.g. Workshop, Conference, Meetup")

    class Config:
        example = {
            "title": "Intro to Async Python",
            "date": "2026-11-05T18:00:00",
            "location": "Room 101",
            "capacity": 40,
            "category": "Workshop"
        }


class CreatedResponse(BaseModel):
    id: str


class SuccessResponse(BaseModel):
    success: bool = True


class EventResponse(BaseModel):
    """Event with live counts"""
    id: str
    owner_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    date: str
    location: Optional[str] = None
    capacity: int
    category: Optional[str] = None
    created_at: Optional[datetime] = None
    registration_count: int = 0
    attendance_count: int = 0
    is_full: bool = False


class ParticipantResponse(BaseModel):
    """Registration with derived attendance status"""
    id: str
    event_id: str
    name: str
    email: str
    department: Optional[str] = None
    registered_at: Optional[datetime] = None
    status: str
    attended_at: Optional[datetime] = None


class EventDetailResponse(EventResponse):
    participants: List[ParticipantResponse]


class ReminderResponse(BaseModel):
    status: str
    recipients: int
