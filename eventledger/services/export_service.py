"""
Export Service
Participant list as CSV
"""

import csv
import io
import re
from typing import Tuple
from eventledger.services.event_service import event_service

CSV_COLUMNS = ["name", "email", "department", "status", "registered_at", "attended_at"]


def _safe_filename(title: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "-", title).strip("-").lower()
    return slug or "event"


class ExportService:
    """Service for ledger exports"""

    @staticmethod
    async def participants_csv(event_id: str, requester: dict) -> Tuple[str, bytes]:
        """
        Build the participant CSV for an event (owner only)

        Returns: (filename, content)
        """
        await event_service.get_managed_event(event_id, requester)
        event = await event_service.get_event_detail(event_id)

        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        for participant in event["participants"]:
            writer.writerow({
                column: "" if participant.get(column) is None else participant.get(column)
                for column in CSV_COLUMNS
            })

        filename = f"{_safe_filename(event['title'])}-participants.csv"
        return filename, buffer.getvalue().encode("utf-8")


# Create singleton instance
export_service = ExportService()
