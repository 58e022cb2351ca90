"""
Registration Service
The registration ledger: one row per (event, attendee email)
"""

import logging
import uuid
from typing import Optional, List
from eventledger.auth import Capability, authorize
from eventledger.config import settings
from eventledger.database import database, write_transaction, lock_clause
from eventledger.errors import DuplicateRegistration, EventFull, NotFound, ValidationError
from eventledger.services.event_service import event_service
from eventledger.services.identity_service import normalize_email

logger = logging.getLogger(__name__)

REGISTRATION_WITH_EVENT = """
    SELECT
        r.id, r.event_id, r.name, r.email, r.department, r.registered_at,
        a.attended_at,
        CASE WHEN a.id IS NOT NULL THEN 'attended' ELSE 'registered' END AS status,
        e.title AS event_title, e.date AS event_date, e.location AS event_location
    FROM registrations r
    JOIN events e ON e.id = r.event_id
    LEFT JOIN attendance a ON a.registration_id = r.id
"""


class RegistrationService:
    """Service for registration ledger operations"""

    @staticmethod
    def _insert_query(enforce_capacity: bool) -> str:
        """
        Conditional insert: the event must exist, the capacity check (when
        enforced) is evaluated in the same statement, and the unique
        (event_id, email) constraint turns a duplicate into zero rows.
        """
        capacity_check = ""
        if enforce_capacity:
            capacity_check = (
                "AND (SELECT COUNT(*) FROM registrations c WHERE c.event_id = e.id) < e.capacity"
            )

        return f"""
            INSERT INTO registrations (id, event_id, user_id, name, email, department, registered_at)
            SELECT :id, e.id, CAST(:user_id AS VARCHAR(36)), :name, :email,
                   CAST(:department AS VARCHAR(100)), CURRENT_TIMESTAMP
            FROM events e
            WHERE e.id = :event_id {capacity_check}
            ON CONFLICT (event_id, email) DO NOTHING
            RETURNING id
        """

    @staticmethod
    async def register(
        event_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        department: Optional[str] = None,
        user: Optional[dict] = None
    ) -> str:
        """
        Register an attendee for an event

        With `user` set the attendee key and name come from the account;
        otherwise `name` and `email` are required.

        Raises:
            NotFound: event does not exist
            DuplicateRegistration: the email already holds a registration for the event
            EventFull: capacity reached (only when capacity is enforced)
        """
        if user is not None:
            email = user["email"]
            name = user["name"]
            department = department or user.get("department")
            user_id = user["id"]
        else:
            user_id = None

        email = normalize_email(email)
        name = (name or "").strip()
        if not email or not name:
            raise ValidationError("Name and email are required")

        registration_id = str(uuid.uuid4())
        values = {
            "id": registration_id,
            "event_id": event_id,
            "user_id": user_id,
            "name": name,
            "email": email,
            "department": (department or "").strip() or None,
        }

        async with write_transaction():
            # Serializes the capacity re-check per event on PostgreSQL
            event = await database.fetch_one(
                "SELECT id FROM events WHERE id = :event_id" + lock_clause(),
                {"event_id": event_id}
            )
            if not event:
                raise NotFound("Event not found")

            row = await database.fetch_one(
                RegistrationService._insert_query(settings.ENFORCE_CAPACITY),
                values
            )

            if row is None:
                existing = await database.fetch_one(
                    "SELECT id FROM registrations WHERE event_id = :event_id AND email = :email",
                    {"event_id": event_id, "email": email}
                )
                if existing:
                    raise DuplicateRegistration()
                raise EventFull()

        logger.info("Registration %s created for event %s", registration_id, event_id)
        return registration_id

    @staticmethod
    async def count_for_event(event_id: str) -> int:
        total = await database.fetch_val(
            "SELECT COUNT(*) FROM registrations WHERE event_id = :event_id",
            {"event_id": event_id}
        )
        return int(total or 0)

    @staticmethod
    async def list_for_event(event_id: str, requester: dict) -> List[dict]:
        """Registrations of an event (owner only)"""
        await event_service.get_managed_event(event_id, requester)

        rows = await database.fetch_all(
            REGISTRATION_WITH_EVENT + " WHERE r.event_id = :event_id ORDER BY r.registered_at ASC, r.id ASC",
            {"event_id": event_id}
        )
        return [dict(row) for row in rows]

    @staticmethod
    async def list_for_owner(requester: dict) -> List[dict]:
        """Participants across every event `requester` owns, newest first"""
        authorize(requester, Capability.MANAGE_EVENT)

        rows = await database.fetch_all(
            REGISTRATION_WITH_EVENT
            + " WHERE e.owner_id = :owner_id ORDER BY r.registered_at DESC, r.id DESC",
            {"owner_id": requester["id"]}
        )
        return [dict(row) for row in rows]

    @staticmethod
    async def is_registered(event_id: str, user: dict) -> bool:
        """True when the account, or its email, holds a registration for the event"""
        row = await database.fetch_one(
            """
            SELECT id FROM registrations
            WHERE event_id = :event_id AND (user_id = :user_id OR email = :email)
            """,
            {"event_id": event_id, "user_id": user["id"], "email": normalize_email(user["email"])}
        )
        return row is not None

    @staticmethod
    async def list_for_user(user: dict) -> List[dict]:
        """
        Registrations belonging to a user

        Matches on the account id and on the attendee key, so registrations
        made anonymously with the same email are included.
        """
        rows = await database.fetch_all(
            REGISTRATION_WITH_EVENT
            + " WHERE r.user_id = :user_id OR r.email = :email ORDER BY e.date ASC, r.id ASC",
            {"user_id": user["id"], "email": normalize_email(user["email"])}
        )
        return [dict(row) for row in rows]


# Create singleton instance
registration_service = RegistrationService()
