"""
Authentication Module
Password hashing, JWT token management and capability checks
"""

from eventledger.auth.password import (
    check_password_policy,
    hash_password,
    verify_password,
    generate_random_password,
)
from eventledger.auth.dependencies import (
    create_access_token,
    decode_access_token,
    token_for_user,
    validate_session,
    get_current_user,
    get_optional_user,
)
from eventledger.auth.permissions import Capability, authorize, require, get_admin

__all__ = [
    "check_password_policy",
    "hash_password",
    "verify_password",
    "generate_random_password",
    "create_access_token",
    "decode_access_token",
    "token_for_user",
    "validate_session",
    "get_current_user",
    "get_optional_user",
    "Capability",
    "authorize",
    "require",
    "get_admin",
]
