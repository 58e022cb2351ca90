"""
Registration Routes
Public registration form and the caller's own registrations
"""

from typing import List, Optional
from fastapi import APIRouter, Depends
from eventledger.auth import Capability, get_current_user, get_optional_user, require
from eventledger.schemas.event import CreatedResponse
from eventledger.schemas.registration import RegisterRequest, RegistrationResponse
from eventledger.services.registration_service import registration_service

router = APIRouter()


@router.post("/register", response_model=CreatedResponse)
async def register(
    request: RegisterRequest,
    current_user: Optional[dict] = Depends(get_optional_user)
):
    """
    Register for an event

    Anonymous callers supply name, email and department. When a bearer
    token is sent, the attendee key is taken from the account instead.
    """
    registration_id = await registration_service.register(
        request.event_id,
        name=request.name,
        email=request.email,
        department=request.department,
        user=current_user
    )
    return {"id": registration_id}


@router.get("/participants", response_model=List[RegistrationResponse])
async def list_participants(current_user: dict = Depends(require(Capability.MANAGE_EVENT))):
    """Registrations across all events you own, newest first"""
    return await registration_service.list_for_owner(current_user)


@router.get("/my-registrations", response_model=List[RegistrationResponse])
async def my_registrations(current_user: dict = Depends(get_current_user)):
    """Registrations of the logged-in user"""
    return await registration_service.list_for_user(current_user)
