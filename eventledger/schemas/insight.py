"""
AI Insight Models
Shapes the insight provider must return for each feature
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Any, Dict
from eventledger.schemas.stats import EventContext


class AttendancePrediction(BaseModel):
    """Forecast for one event from its registration context"""
    predicted_attendance_count: float = Field(..., ge=0)
    confidence_score: float = Field(..., ge=0, le=1)
    reasoning: str
    suggestions: List[str] = Field(default_factory=list)


class QuickForecast(BaseModel):
    """Forecast for a planned event from past event totals"""
    predicted_count: float = Field(..., alias="predictedCount", ge=0)
    reasoning: str

    class Config:
        populate_by_name = True


class TrendAnalysis(BaseModel):
    active_departments: List[str] = Field(..., alias="activeDepartments")
    trends: str
    recommendations: List[str]

    class Config:
        populate_by_name = True


class InsightEnvelope(BaseModel):
    """Best-effort annotation: `insight` is only set when status is "ok" """
    status: str
    insight: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None


class PredictRequest(BaseModel):
    event_id: str


class ForecastRequest(BaseModel):
    """Planned event details; nothing is stored"""
    title: str = Field(..., min_length=1, max_length=200)
    date: Optional[str] = None
    capacity: Optional[int] = None
    category: Optional[str] = None
    location: Optional[str] = None


class PredictResponse(BaseModel):
    event_id: str
    context: EventContext
    prediction: InsightEnvelope


class ForecastResponse(BaseModel):
    forecast: InsightEnvelope


class TrendsResponse(BaseModel):
    stats: Dict[str, Any]
    analysis: InsightEnvelope
