"""
Identity Service
Account creation, authentication and account deletion
"""

import logging
import uuid
from typing import Optional, Tuple
from eventledger.auth import hash_password, verify_password, token_for_user
from eventledger.database import database, write_transaction
from eventledger.errors import DuplicateEmail, InvalidCredentials, NotFound, StorageError, ValidationError

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, name, email, role, department, created_at"


def normalize_email(email: str) -> str:
    """Emails are compared and stored case-insensitively"""
    return (email or "").strip().lower()


class IdentityService:
    """Service for user accounts and sessions"""

    @staticmethod
    async def create_user(
        name: str,
        email: str,
        password: str,
        role: str = "attendee",
        department: Optional[str] = None
    ) -> dict:
        """
        Insert a user, relying on the unique email constraint

        Raises:
            DuplicateEmail: the email is already taken (in any letter case)
        """
        if role not in ("admin", "attendee"):
            raise ValidationError(f"Unknown role: {role}")

        email = normalize_email(email)
        if not email:
            raise ValidationError("Email is required")

        row = await database.fetch_one(
            """
            INSERT INTO users (id, name, email, password_hash, role, department, created_at)
            VALUES (:id, :name, :email, :password_hash, :role, :department, CURRENT_TIMESTAMP)
            ON CONFLICT (email) DO NOTHING
            RETURNING id
            """,
            {
                "id": str(uuid.uuid4()),
                "name": name.strip(),
                # Department is an attendee attribute
                "department": department if role == "attendee" else None,
                "email": email,
                "password_hash": hash_password(password),
                "role": role,
            }
        )

        if row is None:
            raise DuplicateEmail()

        logger.info("Created %s account %s", role, row["id"])
        return await IdentityService.get_user(row["id"])

    @staticmethod
    async def signup(
        name: str,
        email: str,
        password: str,
        department: Optional[str] = None
    ) -> Tuple[str, dict]:
        """Self-registration; always creates an attendee. Returns (token, user)."""
        user = await IdentityService.create_user(name, email, password, "attendee", department)
        return token_for_user(user), user

    @staticmethod
    async def authenticate(email: str, password: str) -> Tuple[str, dict]:
        """
        Verify credentials and issue a token

        Unknown email and wrong password raise the same error.
        """
        row = await database.fetch_one(
            f"SELECT {USER_COLUMNS}, password_hash FROM users WHERE email = :email",
            {"email": normalize_email(email)}
        )

        if not row or not verify_password(password, row["password_hash"]):
            raise InvalidCredentials()

        user = dict(row)
        user.pop("password_hash")
        return token_for_user(user), user

    @staticmethod
    async def get_user(user_id: str) -> dict:
        """Get user by ID"""
        user = await database.fetch_one(
            f"SELECT {USER_COLUMNS} FROM users WHERE id = :id",
            {"id": user_id}
        )

        if not user:
            raise NotFound("User not found")

        return dict(user)

    @staticmethod
    async def get_user_by_email(email: str) -> Optional[dict]:
        user = await database.fetch_one(
            f"SELECT {USER_COLUMNS} FROM users WHERE email = :email",
            {"email": normalize_email(email)}
        )
        return dict(user) if user else None

    @staticmethod
    async def delete_account(user_id: str) -> None:
        """
        Delete a user together with the events it owns

        Owned events go with their registrations and attendance marks.
        Registrations the user made elsewhere stay, keyed by email, with
        user_id cleared. Outstanding tokens stop validating immediately.
        """
        async with write_transaction():
            user = await database.fetch_one(
                "SELECT id FROM users WHERE id = :id",
                {"id": user_id}
            )
            if not user:
                raise NotFound("User not found")

            owned = "SELECT id FROM events WHERE owner_id = :id"
            await database.execute(
                f"DELETE FROM attendance WHERE event_id IN ({owned})",
                {"id": user_id}
            )
            await database.execute(
                f"DELETE FROM registrations WHERE event_id IN ({owned})",
                {"id": user_id}
            )
            await database.execute(
                "DELETE FROM events WHERE owner_id = :id",
                {"id": user_id}
            )
            await database.execute(
                "UPDATE registrations SET user_id = NULL WHERE user_id = :id",
                {"id": user_id}
            )
            await database.execute(
                "DELETE FROM users WHERE id = :id",
                {"id": user_id}
            )

        logger.info("Deleted account %s", user_id)

    @staticmethod
    async def ensure_admin(name: str, email: str, password: str) -> Tuple[dict, bool]:
        """
        Create an admin account unless the email is already taken

        Returns (user, created). An existing non-admin account with the same
        email is left untouched; roles are never changed after creation.
        """
        existing = await IdentityService.get_user_by_email(email)
        if existing:
            if existing["role"] != "admin":
                logger.warning("Bootstrap admin email %s belongs to a non-admin account", existing["email"])
            return existing, False

        try:
            user = await IdentityService.create_user(name, email, password, role="admin")
        except DuplicateEmail:
            # Lost a race with another process creating the same admin
            user = await IdentityService.get_user_by_email(email)
            if user is None:
                raise StorageError()
            return user, False

        return user, True


# Create singleton instance
identity_service = IdentityService()
