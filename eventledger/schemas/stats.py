"""
Statistics Response Models
"""

from pydantic import BaseModel
from typing import Optional, List


class DepartmentStat(BaseModel):
    department: str
    count: int


class CategoryStat(BaseModel):
    category: str
    count: int


class EventStat(BaseModel):
    """Registrations and attendance for one event"""
    id: str
    title: str
    date: str
    capacity: int
    registrations: int
    attendance: int


class StatsResponse(BaseModel):
    scope: str
    total_events: int
    total_registrations: int
    total_attendance: int
    total_attendees: int
    attendance_rate: float
    department_stats: List[DepartmentStat]
    category_stats: List[CategoryStat]
    event_stats: List[EventStat]


class EventContext(BaseModel):
    """Aggregate input for the attendance forecast of one event"""
    event_id: str
    title: str
    category: Optional[str] = None
    capacity: int
    date: str
    location: Optional[str] = None
    registrations: int
    attendance: int
    department_distribution: List[DepartmentStat]
