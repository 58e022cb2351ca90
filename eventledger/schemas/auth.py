"""
Authentication Request/Response Models
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class SignupRequest(BaseModel):
    """Self-registration as an attendee"""
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr = Field(..., description="Login email (must be unique)")
    password: str = Field(..., min_length=8, max_length=72, description="Password (8-72 characters)")
    department: Optional[str] = Field(default=None, max_length=100)

    class Config:
        example = {
            "name": "Jane Smith",
            "email": "jane@example.com",
            "password": "correct-horse",
            "department": "Engineering"
        }


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Public view of a user record"""
    id: str
    name: str
    email: str
    role: str
    department: Optional[str] = None
    created_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    token: str
    user: UserResponse
