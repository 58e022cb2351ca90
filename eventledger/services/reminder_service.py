"""
Reminder Service
Simulated reminder delivery; nothing is sent and nothing is persisted
"""

import asyncio
import logging
from typing import List
from eventledger.config import settings
from eventledger.database import database
from eventledger.services.event_service import event_service

logger = logging.getLogger(__name__)

# Strong references so pending sends are not garbage collected
_pending = set()


class ReminderService:
    """Service for event reminders"""

    @staticmethod
    async def _simulate_send(event: dict, recipients: List[str]) -> None:
        await asyncio.sleep(settings.REMINDER_SIMULATED_DELAY_SECONDS)
        logger.info(
            "Simulated reminder for event %s (%s) sent to %d recipients",
            event["id"], event["title"], len(recipients)
        )

    @staticmethod
    async def send_reminders(event_id: str, requester: dict) -> dict:
        """Queue reminders for registrations that have not checked in yet (owner only)"""
        event = await event_service.get_managed_event(event_id, requester)

        rows = await database.fetch_all(
            """
            SELECT r.email
            FROM registrations r
            LEFT JOIN attendance a ON a.registration_id = r.id
            WHERE r.event_id = :event_id AND a.id IS NULL
            """,
            {"event_id": event_id}
        )
        recipients = [row["email"] for row in rows]

        # Fire and forget
        task = asyncio.create_task(ReminderService._simulate_send(event, recipients))
        _pending.add(task)
        task.add_done_callback(_pending.discard)

        return {"status": "queued", "recipients": len(recipients)}


# Create singleton instance
reminder_service = ReminderService()
