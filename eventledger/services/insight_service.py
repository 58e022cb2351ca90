"""
Insight Service
Best-effort AI annotations over ledger aggregates

The provider is an injected capability with a single method, so the
text-generation backend can be swapped (or stubbed in tests). Nothing
here writes to the ledger; any failure degrades to an "unavailable"
annotation.
"""

import asyncio
import json
import logging
from typing import Protocol, Optional, Type
import httpx
from pydantic import BaseModel, ValidationError as SchemaError
from eventledger.config import settings
from eventledger.errors import UpstreamServiceError
from eventledger.schemas.insight import AttendancePrediction, QuickForecast, TrendAnalysis

logger = logging.getLogger(__name__)


class InsightProvider(Protocol):
    async def generate(self, feature: str, context: dict) -> dict:
        """Return a JSON object for `feature` given structured context"""
        ...


class Feature:
    """Prompt, response schema and validation model for one annotation"""

    def __init__(self, name: str, instruction: str, response_schema: dict, model: Type[BaseModel]):
        self.name = name
        self.instruction = instruction
        self.response_schema = response_schema
        self.model = model

    def prompt(self, context: dict) -> str:
        return f"{self.instruction}\n\nContext:\n{json.dumps(context, default=str, indent=2)}"


FEATURES = {
    "predict_attendance": Feature(
        "predict_attendance",
        "Predict how many registered attendees will actually attend this event. "
        "Return predicted_attendance_count, confidence_score between 0 and 1, "
        "reasoning, and suggestions to improve attendance.",
        {
            "type": "OBJECT",
            "properties": {
                "predicted_attendance_count": {"type": "NUMBER"},
                "confidence_score": {"type": "NUMBER"},
                "reasoning": {"type": "STRING"},
                "suggestions": {"type": "ARRAY", "items": {"type": "STRING"}},
            },
            "required": ["predicted_attendance_count", "confidence_score", "reasoning", "suggestions"],
        },
        AttendancePrediction,
    ),
    "forecast": Feature(
        "forecast",
        "Based on the past event data, predict the attendance for the new event. "
        "Provide a predicted number and a brief reasoning.",
        {
            "type": "OBJECT",
            "properties": {
                "predictedCount": {"type": "NUMBER"},
                "reasoning": {"type": "STRING"},
            },
            "required": ["predictedCount", "reasoning"],
        },
        QuickForecast,
    ),
    "analyze_trends": Feature(
        "analyze_trends",
        "Analyze the event and participant statistics. Identify the most active "
        "departments, trends in attendance over time, and provide 3 actionable "
        "recommendations for future events.",
        {
            "type": "OBJECT",
            "properties": {
                "activeDepartments": {"type": "ARRAY", "items": {"type": "STRING"}},
                "trends": {"type": "STRING"},
                "recommendations": {"type": "ARRAY", "items": {"type": "STRING"}},
            },
            "required": ["activeDepartments", "trends", "recommendations"],
        },
        TrendAnalysis,
    ),
}


class GeminiInsightProvider:
    """Generative Language REST API with JSON-constrained output"""

    def __init__(
        self,
        api_key: str,
        model: str = None,
        base_url: str = None,
        timeout: float = None,
        transport: httpx.AsyncBaseTransport = None
    ):
        self.api_key = api_key
        self.transport = transport
        self.model = model or settings.AI_MODEL
        self.base_url = (base_url or settings.AI_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.AI_TIMEOUT_SECONDS

    async def generate(self, feature: str, context: dict) -> dict:
        definition = FEATURES[feature]
        url = f"{self.base_url}/models/{self.model}:generateContent"
        body = {
            "contents": [{"role": "user", "parts": [{"text": definition.prompt(context)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": definition.response_schema,
            },
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(url, json=body, headers={"x-goog-api-key": self.api_key})
        except httpx.HTTPError as e:
            raise UpstreamServiceError(f"Insight request failed: {e.__class__.__name__}")

        if resp.status_code != 200:
            raise UpstreamServiceError(f"Insight service returned HTTP {resp.status_code}")

        try:
            text = resp.json()["candidates"][0]["content"]["parts"][0]["text"]
            result = json.loads(text)
        except (ValueError, KeyError, IndexError, TypeError):
            raise UpstreamServiceError("Insight service returned malformed JSON")

        if not isinstance(result, dict):
            raise UpstreamServiceError("Insight service returned malformed JSON")

        return result


class NullInsightProvider:
    """Used when no API key is configured"""

    async def generate(self, feature: str, context: dict) -> dict:
        raise UpstreamServiceError("AI insights are not configured")


class InsightService:
    """Wraps a provider with a timeout and response validation"""

    def __init__(self, provider: InsightProvider, timeout: Optional[float] = None):
        self.provider = provider
        self.timeout = timeout if timeout is not None else settings.AI_TIMEOUT_SECONDS

    async def annotate(self, feature: str, context: dict) -> dict:
        """
        Returns {"status": "ok", "insight": {...}} or
        {"status": "unavailable", "reason": "..."}; never raises for provider failures.
        """
        definition = FEATURES[feature]

        try:
            raw = await asyncio.wait_for(self.provider.generate(feature, context), self.timeout)
            insight = definition.model.model_validate(raw)
        except asyncio.TimeoutError:
            reason = "Insight service timed out"
        except UpstreamServiceError as e:
            reason = e.message
        except SchemaError:
            reason = "Insight service returned an unexpected response"
        except Exception:
            logger.exception("Insight provider failed for %s", feature)
            reason = "Insight service unavailable"
        else:
            return {"status": "ok", "insight": insight.model_dump(by_alias=True)}

        logger.warning("Insight %s unavailable: %s", feature, reason)
        return {"status": "unavailable", "reason": reason}


def build_provider() -> InsightProvider:
    if settings.AI_API_KEY:
        return GeminiInsightProvider(settings.AI_API_KEY)
    return NullInsightProvider()


def get_insight_service() -> InsightService:
    """FastAPI dependency; tests override it with a stub provider"""
    return InsightService(build_provider())
