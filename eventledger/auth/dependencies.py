"""
Authentication Dependencies
JWT token handling and user authentication
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from eventledger.config import settings
from eventledger.database import database
from eventledger.errors import Unauthorized

logger = logging.getLogger(__name__)

# Security scheme; missing credentials are reported as Unauthorized below
security = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token

    Args:
        data: Data to encode in token
        expires_delta: Token expiration time

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRATION_HOURS)

    to_encode.update({"exp": expire})

    encoded_jwt = jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )

    return encoded_jwt


def token_for_user(user: dict) -> str:
    """Issue a token carrying the identity fields clients display"""
    return create_access_token({
        "sub": str(user["id"]),
        "email": user["email"],
        "name": user["name"],
        "role": user["role"],
    })


def decode_access_token(token: str) -> dict:
    """
    Decode JWT access token

    Raises:
        Unauthorized: If the signature is invalid or the token expired
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        raise Unauthorized()


async def validate_session(token: str) -> dict:
    """
    Resolve a token to the live user record

    A signature check alone is not enough: the user must still exist,
    otherwise tokens issued before a deletion or data reset would keep working.
    """
    payload = decode_access_token(token)
    user_id = payload.get("sub")

    if not user_id:
        raise Unauthorized("Invalid authentication credentials")

    user = await database.fetch_one(
        "SELECT id, name, email, role, department FROM users WHERE id = :id",
        {"id": user_id}
    )

    if not user:
        logger.info("Rejected token for missing user %s", user_id)
        raise Unauthorized("User no longer exists. Please log in again.")

    return dict(user)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """Require an authenticated user"""
    if credentials is None:
        raise Unauthorized("Not authenticated")
    return await validate_session(credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[dict]:
    """
    Authenticated user if a valid bearer token was sent, else None

    Used on routes open to anonymous callers: an expired or unknown token
    falls back to anonymous access instead of rejecting the request.
    Routes that need the user still answer 401 on their own.
    """
    if credentials is None:
        return None
    try:
        return await validate_session(credentials.credentials)
    except Unauthorized as e:
        logger.info("Ignoring invalid bearer token on optional route: %s", e.message)
        return None
