"""
Statistics Routes
Dashboard aggregates, always recomputed from the ledger
"""

from typing import Literal
from fastapi import APIRouter, Depends, Query
from eventledger.auth import get_admin
from eventledger.schemas.stats import StatsResponse
from eventledger.services.report_service import report_service

router = APIRouter()


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    scope: Literal["mine", "all"] = Query("mine", description="your events, or every event"),
    current_admin: dict = Depends(get_admin)
):
    """
    Admin dashboard statistics

    Totals, attendance rate, department breakdown, category breakdown and
    per-event registrations/attendance ordered by event date.
    """
    owner_id = current_admin["id"] if scope == "mine" else None
    return await report_service.get_stats(owner_id=owner_id)
