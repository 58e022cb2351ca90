"""
Attendance Routes
Door check-in (staff or QR self-service) and the admin correction toggle
"""

from typing import Optional
from fastapi import APIRouter, Depends
from eventledger.auth import get_current_user, get_optional_user
from eventledger.errors import Unauthorized, ValidationError
from eventledger.schemas.registration import (
    CheckInRequest,
    CheckInResponse,
    ToggleAttendanceRequest,
    ToggleAttendanceResponse,
)
from eventledger.services.attendance_service import attendance_service

router = APIRouter()


@router.post("/attendance", response_model=CheckInResponse)
async def check_in(
    request: CheckInRequest,
    current_user: Optional[dict] = Depends(get_optional_user)
):
    """
    Check an attendee in

    - **participant_id**: staff check-in, requires the event owner's token
    - **event_id + email**: self check-in after scanning the event QR code

    A second check-in for the same registration fails with `already_checked_in`.
    """
    if request.participant_id:
        if current_user is None:
            raise Unauthorized("Staff check-in requires authentication")
        return await attendance_service.check_in(
            request.participant_id,
            current_user,
            event_id=request.event_id
        )

    if request.event_id and request.email:
        return await attendance_service.check_in_by_email(request.event_id, request.email)

    raise ValidationError("Provide participant_id, or event_id and email")


@router.post("/admin/attendance", response_model=ToggleAttendanceResponse)
async def toggle_attendance(
    request: ToggleAttendanceRequest,
    current_user: dict = Depends(get_current_user)
):
    """Set or clear a registration's attendance mark (event owner only)"""
    return await attendance_service.toggle_attendance(
        request.registration_id,
        request.attended,
        current_user
    )
