"""
Report Service
Read-only aggregates recomputed from the ledger on every request
"""

from typing import Optional, List
from eventledger.database import database, read_snapshot
from eventledger.services.event_service import event_service

DEPARTMENT_LABEL = "COALESCE(NULLIF(r.department, ''), 'Unspecified')"
CATEGORY_LABEL = "COALESCE(NULLIF(e.category, ''), 'Uncategorized')"


def attendance_rate(attendance: int, registrations: int) -> float:
    """Share of registrations that checked in; 0.0 when nobody registered"""
    if not registrations:
        return 0.0
    return round(attendance / registrations, 4)


class ReportService:
    """Service for dashboard statistics"""

    @staticmethod
    async def get_stats(owner_id: Optional[str] = None) -> dict:
        """
        Dashboard aggregates

        Args:
            owner_id: restrict to events owned by this user; None covers all events

        Returns:
            Totals, attendance rate and department / category / per-event breakdowns
        """
        where = "WHERE e.owner_id = :owner_id" if owner_id else ""
        params = {"owner_id": owner_id} if owner_id else {}

        async with read_snapshot():
            total_events = await database.fetch_val(
                f"SELECT COUNT(*) FROM events e {where}", params
            )
            total_registrations = await database.fetch_val(
                f"SELECT COUNT(*) FROM registrations r JOIN events e ON e.id = r.event_id {where}",
                params
            )
            total_attendance = await database.fetch_val(
                f"SELECT COUNT(*) FROM attendance a JOIN events e ON e.id = a.event_id {where}",
                params
            )
            total_attendees = await database.fetch_val(
                f"SELECT COUNT(DISTINCT r.email) FROM registrations r JOIN events e ON e.id = r.event_id {where}",
                params
            )

            departments = await database.fetch_all(
                f"""
                SELECT {DEPARTMENT_LABEL} AS department, COUNT(*) AS count
                FROM registrations r
                JOIN events e ON e.id = r.event_id
                {where}
                GROUP BY {DEPARTMENT_LABEL}
                ORDER BY count DESC, department ASC
                """,
                params
            )

            categories = await database.fetch_all(
                f"""
                SELECT {CATEGORY_LABEL} AS category, COUNT(*) AS count
                FROM events e
                {where}
                GROUP BY {CATEGORY_LABEL}
                ORDER BY count DESC, category ASC
                """,
                params
            )

            per_event = await database.fetch_all(
                f"""
                SELECT
                    e.id, e.title, e.date, e.capacity,
                    (SELECT COUNT(*) FROM registrations r WHERE r.event_id = e.id) AS registrations,
                    (SELECT COUNT(*) FROM attendance a WHERE a.event_id = e.id) AS attendance
                FROM events e
                {where}
                ORDER BY e.date ASC, e.id ASC
                """,
                params
            )

        total_registrations = int(total_registrations or 0)
        total_attendance = int(total_attendance or 0)

        return {
            "scope": "mine" if owner_id else "all",
            "total_events": int(total_events or 0),
            "total_registrations": total_registrations,
            "total_attendance": total_attendance,
            "total_attendees": int(total_attendees or 0),
            "attendance_rate": attendance_rate(total_attendance, total_registrations),
            "department_stats": [
                {"department": row["department"], "count": int(row["count"])} for row in departments
            ],
            "category_stats": [
                {"category": row["category"], "count": int(row["count"])} for row in categories
            ],
            "event_stats": [
                {
                    "id": row["id"],
                    "title": row["title"],
                    "date": row["date"],
                    "capacity": row["capacity"],
                    "registrations": int(row["registrations"]),
                    "attendance": int(row["attendance"]),
                }
                for row in per_event
            ],
        }

    @staticmethod
    async def department_distribution(event_id: str) -> List[dict]:
        rows = await database.fetch_all(
            f"""
            SELECT {DEPARTMENT_LABEL} AS department, COUNT(*) AS count
            FROM registrations r
            WHERE r.event_id = :event_id
            GROUP BY {DEPARTMENT_LABEL}
            ORDER BY count DESC, department ASC
            """,
            {"event_id": event_id}
        )
        return [{"department": row["department"], "count": int(row["count"])} for row in rows]

    @staticmethod
    async def get_event_context(event_id: str) -> dict:
        """Per-event aggregate used as forecast input"""
        event = await event_service.get_event(event_id)
        return {
            "event_id": event["id"],
            "title": event["title"],
            "category": event["category"],
            "capacity": event["capacity"],
            "date": event["date"],
            "location": event["location"],
            "registrations": event["registration_count"],
            "attendance": event["attendance_count"],
            "department_distribution": await ReportService.department_distribution(event_id),
        }


# Create singleton instance
report_service = ReportService()
