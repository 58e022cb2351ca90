"""
Registration and Attendance Request/Response Models
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class RegisterRequest(BaseModel):
    """
    Register for an event

    Anonymous callers must send name and email; with a bearer token both
    are taken from the account.
    """
    event_id: str
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    department: Optional[str] = Field(default=None, max_length=100)

    class Config:
        example = {
            "event_id": "7b1c0f8e-4d7a-4a54-9d4e-0f2d5d3f8a11",
            "name": "John Doe",
            "email": "john.doe@example.com",
            "department": "Marketing"
        }


class AccountRegisterRequest(BaseModel):
    department: Optional[str] = Field(default=None, max_length=100)


class RegistrationResponse(BaseModel):
    """Registration joined with its event"""
    id: str
    event_id: str
    name: str
    email: str
    department: Optional[str] = None
    registered_at: Optional[datetime] = None
    status: str
    attended_at: Optional[datetime] = None
    event_title: Optional[str] = None
    event_date: Optional[str] = None
    event_location: Optional[str] = None


class CheckInRequest(BaseModel):
    """Staff check-in by participant id, or self check-in by event + email"""
    participant_id: Optional[str] = None
    event_id: Optional[str] = None
    email: Optional[EmailStr] = None


class CheckInResponse(BaseModel):
    id: str
    registration_id: str
    success: bool = True


class ToggleAttendanceRequest(BaseModel):
    registration_id: str
    attended: bool


class ToggleAttendanceResponse(BaseModel):
    registration_id: str
    status: str


class AttendanceRecordResponse(BaseModel):
    registration_id: str
    name: str
    email: str
    department: Optional[str] = None
    attended_at: Optional[datetime] = None
