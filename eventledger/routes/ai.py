"""
AI Insight Routes
Forecasts and trend analysis; the annotation is optional and never blocks the numbers
"""

from fastapi import APIRouter, Depends
from eventledger.auth import Capability, get_admin, require
from eventledger.errors import Forbidden
from eventledger.schemas.insight import (
    PredictRequest,
    PredictResponse,
    ForecastRequest,
    ForecastResponse,
    TrendsResponse,
)
from eventledger.services.insight_service import InsightService, get_insight_service
from eventledger.services.event_service import event_service
from eventledger.services.registration_service import registration_service
from eventledger.services.report_service import report_service

router = APIRouter()


async def authorize_prediction(event_id: str, user: dict) -> None:
    """Only the event owner and people registered for the event may see its forecast"""
    event = await event_service.get_event(event_id)
    if str(event["owner_id"]) == str(user["id"]):
        return
    if await registration_service.is_registered(event_id, user):
        return
    raise Forbidden("Predictions are limited to the event owner and its registrants")


@router.post("/predict", response_model=PredictResponse)
async def predict_attendance(
    request: PredictRequest,
    current_user: dict = Depends(require(Capability.REQUEST_PREDICTION)),
    insights: InsightService = Depends(get_insight_service)
):
    """Predict turnout for an existing event from its registrations"""
    await authorize_prediction(request.event_id, current_user)
    context = await report_service.get_event_context(request.event_id)
    prediction = await insights.annotate("predict_attendance", context)
    return {"event_id": request.event_id, "context": context, "prediction": prediction}


@router.post("/forecast", response_model=ForecastResponse)
async def forecast_attendance(
    request: ForecastRequest,
    current_admin: dict = Depends(get_admin),
    insights: InsightService = Depends(get_insight_service)
):
    """Forecast turnout for a planned event from the caller's past events"""
    stats = await report_service.get_stats(owner_id=current_admin["id"])
    context = {
        "event": request.model_dump(),
        "past_events": stats["event_stats"],
    }
    return {"forecast": await insights.annotate("forecast", context)}


@router.get("/trends", response_model=TrendsResponse)
async def analyze_trends(
    current_admin: dict = Depends(get_admin),
    insights: InsightService = Depends(get_insight_service)
):
    """Department activity, attendance trends and recommendations"""
    stats = await report_service.get_stats(owner_id=current_admin["id"])
    return {"stats": stats, "analysis": await insights.annotate("analyze_trends", stats)}
