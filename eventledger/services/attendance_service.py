"""
Attendance Service
Check-in state machine: registered -> attended, at most one mark per registration
"""

import logging
import uuid
from typing import List
from eventledger.auth import Capability, authorize
from eventledger.database import database, write_transaction, lock_clause
from eventledger.errors import AlreadyCheckedIn, NotFound, NotRegistered
from eventledger.services.event_service import event_service
from eventledger.services.identity_service import normalize_email

logger = logging.getLogger(__name__)


class AttendanceService:
    """Service for attendance ledger operations"""

    @staticmethod
    async def _mark(registration: dict) -> dict:
        """Insert the attendance mark; the unique registration_id makes a repeat a no-op"""
        row = await database.fetch_one(
            """
            INSERT INTO attendance (id, registration_id, event_id, attended_at)
            VALUES (:id, :registration_id, :event_id, CURRENT_TIMESTAMP)
            ON CONFLICT (registration_id) DO NOTHING
            RETURNING id
            """,
            {
                "id": str(uuid.uuid4()),
                "registration_id": registration["id"],
                "event_id": registration["event_id"],
            }
        )

        if row is None:
            raise AlreadyCheckedIn()

        logger.info("Registration %s checked in", registration["id"])
        return {"id": row["id"], "registration_id": registration["id"]}

    @staticmethod
    async def _managed_registration(registration_id: str, requester: dict) -> dict:
        registration = await database.fetch_one(
            """
            SELECT r.id, r.event_id, e.owner_id
            FROM registrations r
            JOIN events e ON e.id = r.event_id
            WHERE r.id = :registration_id
            """ + lock_clause(),
            {"registration_id": registration_id}
        )
        if not registration:
            raise NotRegistered()

        registration = dict(registration)
        authorize(requester, Capability.MANAGE_EVENT, registration)
        return registration

    @staticmethod
    async def check_in(registration_id: str, requester: dict, event_id: str = None) -> dict:
        """
        Staff check-in by registration id

        Raises:
            NotRegistered: no such registration (or it belongs to another event)
            AlreadyCheckedIn: the registration already has a mark
        """
        authorize(requester, Capability.MANAGE_EVENT)

        async with write_transaction():
            registration = await AttendanceService._managed_registration(registration_id, requester)
            if event_id and registration["event_id"] != event_id:
                raise NotRegistered()
            return await AttendanceService._mark(registration)

    @staticmethod
    async def check_in_by_email(event_id: str, email: str) -> dict:
        """
        Self-service check-in (QR code): resolve the email within this event only

        Raises:
            NotFound: event does not exist
            NotRegistered: the email has no registration for this event
            AlreadyCheckedIn: the registration already has a mark
        """
        async with write_transaction():
            event = await database.fetch_one(
                "SELECT id FROM events WHERE id = :event_id",
                {"event_id": event_id}
            )
            if not event:
                raise NotFound("Event not found")

            registration = await database.fetch_one(
                "SELECT id, event_id FROM registrations WHERE event_id = :event_id AND email = :email"
                + lock_clause(),
                {"event_id": event_id, "email": normalize_email(email)}
            )
            if not registration:
                raise NotRegistered()

            return await AttendanceService._mark(dict(registration))

    @staticmethod
    async def toggle_attendance(registration_id: str, attended: bool, requester: dict) -> dict:
        """
        Correction path: set or clear the mark unconditionally

        Unlike check-in, setting an existing mark is not an error.
        """
        authorize(requester, Capability.MANAGE_EVENT)

        async with write_transaction():
            registration = await AttendanceService._managed_registration(registration_id, requester)
            if attended:
                await database.execute(
                    """
                    INSERT INTO attendance (id, registration_id, event_id, attended_at)
                    VALUES (:id, :registration_id, :event_id, CURRENT_TIMESTAMP)
                    ON CONFLICT (registration_id) DO NOTHING
                    """,
                    {
                        "id": str(uuid.uuid4()),
                        "registration_id": registration["id"],
                        "event_id": registration["event_id"],
                    }
                )
            else:
                await database.execute(
                    "DELETE FROM attendance WHERE registration_id = :registration_id",
                    {"registration_id": registration["id"]}
                )

        status = "attended" if attended else "registered"
        logger.info("Registration %s set to %s by %s", registration_id, status, requester["id"])
        return {"registration_id": registration_id, "status": status}

    @staticmethod
    async def status_of(registration_id: str) -> str:
        """Derived status: attended iff a mark exists"""
        row = await database.fetch_one(
            """
            SELECT CASE WHEN a.id IS NOT NULL THEN 'attended' ELSE 'registered' END AS status
            FROM registrations r
            LEFT JOIN attendance a ON a.registration_id = r.id
            WHERE r.id = :registration_id
            """,
            {"registration_id": registration_id}
        )
        if not row:
            raise NotRegistered()
        return row["status"]

    @staticmethod
    async def list_attendance(event_id: str, requester: dict) -> List[dict]:
        """Checked-in attendees of an event (owner only)"""
        await event_service.get_managed_event(event_id, requester)

        rows = await database.fetch_all(
            """
            SELECT r.id AS registration_id, r.name, r.email, r.department, a.attended_at
            FROM attendance a
            JOIN registrations r ON r.id = a.registration_id
            WHERE a.event_id = :event_id
            ORDER BY a.attended_at ASC, r.id ASC
            """,
            {"event_id": event_id}
        )
        return [dict(row) for row in rows]


# Create singleton instance
attendance_service = AttendanceService()
