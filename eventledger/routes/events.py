"""
Event Routes
Public catalog plus owner-only management endpoints
"""

from io import BytesIO
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from eventledger.auth import Capability, authorize, get_current_user, get_optional_user, require
from eventledger.errors import ValidationError
from eventledger.schemas.event import (
    CreateEventRequest,
    CreatedResponse,
    SuccessResponse,
    EventResponse,
    EventDetailResponse,
    ReminderResponse,
)
from eventledger.schemas.registration import (
    AccountRegisterRequest,
    RegistrationResponse,
    AttendanceRecordResponse,
)
from eventledger.services.event_service import event_service
from eventledger.services.registration_service import registration_service
from eventledger.services.attendance_service import attendance_service
from eventledger.services.reminder_service import reminder_service
from eventledger.services.export_service import export_service

router = APIRouter()


@router.get("", response_model=List[EventResponse])
async def list_events(
    scope: Literal["all", "mine"] = Query("all", description="all events, or only events you own"),
    current_user: Optional[dict] = Depends(get_optional_user)
):
    """
    List events with live registration counts

    - **scope=all**: public catalog
    - **scope=mine**: admin dashboard (events owned by the caller)
    """
    if scope == "mine":
        authorize(current_user, Capability.MANAGE_EVENT)
        return await event_service.list_events(owner_id=current_user["id"])
    return await event_service.list_events()


@router.post("", response_model=CreatedResponse)
async def create_event(
    request: CreateEventRequest,
    current_user: dict = Depends(require(Capability.CREATE_EVENT))
):
    """Create an event (admin only)"""
    event_id = await event_service.create_event(current_user, request)
    return {"id": event_id}


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event(event_id: str):
    """Event details with participants and their attendance status"""
    return await event_service.get_event_detail(event_id)


@router.delete("/{event_id}", response_model=SuccessResponse)
async def delete_event(
    event_id: str,
    confirm: bool = Query(False, description="Must be true; deletion cannot be undone"),
    current_user: dict = Depends(get_current_user)
):
    """
    Delete an event with all of its registrations and attendance (owner only)
    """
    if not confirm:
        raise ValidationError("Confirmation required: deleting an event removes all its registrations")

    await event_service.delete_event(event_id, current_user)
    return {"success": True}


@router.get("/{event_id}/registrations", response_model=List[RegistrationResponse])
async def list_event_registrations(
    event_id: str,
    current_user: dict = Depends(get_current_user)
):
    """Registrations for an event (owner only)"""
    return await registration_service.list_for_event(event_id, current_user)


@router.get("/{event_id}/attendance", response_model=List[AttendanceRecordResponse])
async def list_event_attendance(
    event_id: str,
    current_user: dict = Depends(get_current_user)
):
    """Checked-in attendees (owner only)"""
    return await attendance_service.list_attendance(event_id, current_user)


@router.get("/{event_id}/export.csv")
async def export_participants(
    event_id: str,
    current_user: dict = Depends(get_current_user)
):
    """Download the participant list as CSV (owner only)"""
    filename, content = await export_service.participants_csv(event_id, current_user)
    return StreamingResponse(
        BytesIO(content),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.post("/{event_id}/reminders", response_model=ReminderResponse)
async def send_reminders(
    event_id: str,
    current_user: dict = Depends(get_current_user)
):
    """Queue (simulated) reminders to registrants who have not checked in"""
    return await reminder_service.send_reminders(event_id, current_user)


@router.post("/{event_id}/register", response_model=CreatedResponse)
async def register_with_account(
    event_id: str,
    request: Optional[AccountRegisterRequest] = None,
    current_user: dict = Depends(get_current_user)
):
    """Register the logged-in user; name and email come from the account"""
    registration_id = await registration_service.register(
        event_id,
        department=request.department if request else None,
        user=current_user
    )
    return {"id": registration_id}
