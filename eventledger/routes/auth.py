"""
Authentication Routes
Signup, login, current user and account deletion
"""

from fastapi import APIRouter, Depends
from eventledger.auth import get_current_user
from eventledger.schemas.auth import SignupRequest, LoginRequest, AuthResponse, UserResponse
from eventledger.schemas.event import SuccessResponse
from eventledger.services.identity_service import identity_service

router = APIRouter()


@router.post("/signup", response_model=AuthResponse)
async def signup(request: SignupRequest):
    """
    Create an attendee account

    Returns a token so the client is logged in right away.
    """
    token, user = await identity_service.signup(
        name=request.name,
        email=request.email,
        password=request.password,
        department=request.department
    )
    return {"token": token, "user": user}


@router.post("/login", response_model=AuthResponse)
async def login(credentials: LoginRequest):
    """Login for admins and attendees"""
    token, user = await identity_service.authenticate(credentials.email, credentials.password)
    return {"token": token, "user": user}


@router.post("/logout", response_model=SuccessResponse)
async def logout():
    """
    Logout endpoint (client should delete token)
    """
    return {"success": True}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: dict = Depends(get_current_user)):
    """Live user record for the token"""
    return await identity_service.get_user(current_user["id"])


@router.delete("/me", response_model=SuccessResponse)
async def delete_my_account(current_user: dict = Depends(get_current_user)):
    """Delete the caller's account and the events it owns"""
    await identity_service.delete_account(current_user["id"])
    return {"success": True}
