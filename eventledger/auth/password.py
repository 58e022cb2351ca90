"""
Password Policy and Hashing
bcrypt via passlib; bcrypt only reads the first 72 bytes, so longer passwords are rejected
"""

import secrets
import string
from passlib.context import CryptContext
from eventledger.errors import ValidationError

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def check_password_policy(password: str) -> str:
    """
    Enforce the account password rules

    The request schema caps length in characters; this also caps the UTF-8
    size, since multi-byte characters can push a 72-character password past
    what bcrypt compares.

    Raises:
        ValidationError: too short, or longer than 72 bytes
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return password


def hash_password(password: str) -> str:
    return pwd_context.hash(check_password_policy(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Over-long input never matches instead of being silently truncated"""
    if len(plain_password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def generate_random_password(length: int = 12) -> str:
    """Random password for admin accounts created from the command line"""
    length = max(length, MIN_PASSWORD_LENGTH)
    alphabet = string.ascii_letters + string.digits
    while True:
        password = "".join(secrets.choice(alphabet) for _ in range(length))
        # At least one letter and one digit
        if any(c.isdigit() for c in password) and any(c.isalpha() for c in password):
            return password
