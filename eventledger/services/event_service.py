"""
Event Service
Event catalog: creation, listing with live counts, detail and cascading delete
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, List
from eventledger.auth import Capability, authorize
from eventledger.database import database, write_transaction, lock_clause
from eventledger.errors import NotFound, ValidationError
from eventledger.schemas.event import CreateEventRequest

logger = logging.getLogger(__name__)

EVENT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Counts are computed on every read; there is no stored counter to drift
EVENT_WITH_COUNTS = """
    SELECT
        e.id, e.owner_id, e.title, e.description, e.date, e.location,
        e.capacity, e.category, e.created_at,
        (SELECT COUNT(*) FROM registrations r WHERE r.event_id = e.id) AS registration_count,
        (SELECT COUNT(*) FROM attendance a WHERE a.event_id = e.id) AS attendance_count
    FROM events e
"""

PARTICIPANTS = """
    SELECT
        r.id, r.event_id, r.name, r.email, r.department, r.registered_at,
        a.attended_at,
        CASE WHEN a.id IS NOT NULL THEN 'attended' ELSE 'registered' END AS status
    FROM registrations r
    LEFT JOIN attendance a ON a.registration_id = r.id
    WHERE r.event_id = :event_id
    ORDER BY r.registered_at ASC, r.id ASC
"""


def normalize_event_date(value: str) -> str:
    """
    Parse an ISO-8601 date/datetime into the fixed-width stored form

    Offsets are converted to UTC and dropped so that string order matches
    time order.
    """
    text = (value or "").strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid event date: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)

    return parsed.replace(microsecond=0).strftime(EVENT_DATE_FORMAT)


def validate_capacity(capacity) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
        raise ValidationError("Capacity must be a positive integer")
    return capacity


def _with_flags(row) -> dict:
    event = dict(row)
    event["registration_count"] = int(event.get("registration_count") or 0)
    event["attendance_count"] = int(event.get("attendance_count") or 0)
    event["is_full"] = event["registration_count"] >= event["capacity"]
    return event


class EventService:
    """Service for event catalog operations"""

    @staticmethod
    async def create_event(owner: dict, data: CreateEventRequest) -> str:
        """Create an event owned by `owner` (admins only)"""
        authorize(owner, Capability.CREATE_EVENT)

        title = data.title.strip()
        if not title:
            raise ValidationError("Title is required")

        event_id = str(uuid.uuid4())
        await database.execute(
            """
            INSERT INTO events (id, owner_id, title, description, date, location, capacity, category, created_at)
            VALUES (:id, :owner_id, :title, :description, :date, :location, :capacity, :category, CURRENT_TIMESTAMP)
            """,
            {
                "id": event_id,
                "owner_id": owner["id"],
                "title": title,
                "description": data.description,
                "date": normalize_event_date(data.date),
                "location": data.location,
                "capacity": validate_capacity(data.capacity),
                "category": data.category,
            }
        )

        logger.info("Event %s created by %s", event_id, owner["id"])
        return event_id

    @staticmethod
    async def list_events(owner_id: Optional[str] = None) -> List[dict]:
        """All events, or only those owned by `owner_id`, date ascending"""
        query = EVENT_WITH_COUNTS
        params = {}
        if owner_id:
            query += " WHERE e.owner_id = :owner_id"
            params["owner_id"] = owner_id
        query += " ORDER BY e.date ASC, e.created_at ASC"

        rows = await database.fetch_all(query, params)
        return [_with_flags(row) for row in rows]

    @staticmethod
    async def get_event(event_id: str) -> dict:
        """Get event by ID with live counts"""
        row = await database.fetch_one(
            EVENT_WITH_COUNTS + " WHERE e.id = :event_id",
            {"event_id": event_id}
        )

        if not row:
            raise NotFound("Event not found")

        return _with_flags(row)

    @staticmethod
    async def get_event_detail(event_id: str) -> dict:
        """Event plus participants with derived attendance status"""
        event = await EventService.get_event(event_id)
        participants = await database.fetch_all(PARTICIPANTS, {"event_id": event_id})
        event["participants"] = [dict(p) for p in participants]
        return event

    @staticmethod
    async def get_managed_event(event_id: str, requester: dict) -> dict:
        """Fetch an event and require that `requester` may manage it"""
        event = await EventService.get_event(event_id)
        authorize(requester, Capability.MANAGE_EVENT, event)
        return event

    @staticmethod
    async def delete_event(event_id: str, requester: dict) -> None:
        """
        Delete an event with all its registrations and attendance marks

        Runs as one transaction, so no intermediate state is ever visible.
        Of two racing deletes, the second gets NotFound.
        """
        authorize(requester, Capability.MANAGE_EVENT)

        async with write_transaction():
            params = {"event_id": event_id}
            event = await database.fetch_one(
                "SELECT id, owner_id FROM events WHERE id = :event_id" + lock_clause(),
                params
            )
            if not event:
                raise NotFound("Event not found")
            authorize(requester, Capability.MANAGE_EVENT, dict(event))

            await database.execute("DELETE FROM attendance WHERE event_id = :event_id", params)
            await database.execute("DELETE FROM registrations WHERE event_id = :event_id", params)
            deleted = await database.fetch_one(
                "DELETE FROM events WHERE id = :event_id RETURNING id",
                params
            )
            if deleted is None:
                raise NotFound("Event not found")

        logger.info("Event %s deleted by %s", event_id, requester["id"])


# Create singleton instance
event_service = EventService()
