import asyncio
import json

import httpx
import pytest

from conftest import auth_header, create_event, register, signup
from eventledger.errors import UpstreamServiceError
from eventledger.main import app
from eventledger.services.insight_service import (
    GeminiInsightProvider,
    InsightService,
    NullInsightProvider,
    get_insight_service,
)

PREDICTION = {
    "predicted_attendance_count": 7,
    "confidence_score": 0.8,
    "reasoning": "Workshops usually keep most of their registrants.",
    "suggestions": ["Send a reminder the day before"],
}


class StubProvider:
    def __init__(self, result=None, error=None, delay=0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = []

    async def generate(self, feature, context):
        self.calls.append((feature, context))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result


def use_provider(provider, timeout=1.0):
    app.dependency_overrides[get_insight_service] = lambda: InsightService(provider, timeout=timeout)


def test_predict_returns_context_and_prediction(client, admin_token):
    event_id = create_event(client, admin_token, capacity=20)
    register(client, event_id, "ann@example.com", department="Sales")
    provider = StubProvider(result=PREDICTION)
    use_provider(provider)

    resp = client.post("/ai/predict", json={"event_id": event_id}, headers=auth_header(admin_token))

    assert resp.status_code == 200
    body = resp.json()
    assert body["context"]["registrations"] == 1
    assert body["context"]["department_distribution"] == [{"department": "Sales", "count": 1}]
    assert body["prediction"]["status"] == "ok"
    assert body["prediction"]["insight"]["predicted_attendance_count"] == 7
    assert provider.calls[0][0] == "predict_attendance"


def test_registered_attendee_may_request_prediction(client, admin_token):
    event_id = create_event(client, admin_token)
    use_provider(StubProvider(result=PREDICTION))
    token = signup(client, "jane@example.com")["token"]
    client.post(f"/events/{event_id}/register", headers=auth_header(token))

    resp = client.post("/ai/predict", json={"event_id": event_id}, headers=auth_header(token))
    assert resp.status_code == 200


def test_prediction_hidden_from_strangers(client, admin_token, other_admin_token):
    event_id = create_event(client, admin_token)
    register(client, event_id, "ann@example.com", department="Sales")
    provider = StubProvider(result=PREDICTION)
    use_provider(provider)
    stranger = signup(client, "jane@example.com")["token"]

    for token in (stranger, other_admin_token):
        resp = client.post("/ai/predict", json={"event_id": event_id}, headers=auth_header(token))
        assert resp.status_code == 403
        assert "context" not in resp.json()
    assert provider.calls == []


def test_predict_unknown_event(client, admin_token):
    use_provider(StubProvider(result=PREDICTION))
    resp = client.post("/ai/predict", json={"event_id": "nope"}, headers=auth_header(admin_token))
    assert resp.status_code == 404


def test_provider_failure_degrades_to_unavailable(client, admin_token):
    event_id = create_event(client, admin_token)
    use_provider(StubProvider(error=UpstreamServiceError("Insight service returned HTTP 503")))

    resp = client.post("/ai/predict", json={"event_id": event_id}, headers=auth_header(admin_token))

    assert resp.status_code == 200
    assert resp.json()["prediction"] == {
        "status": "unavailable",
        "insight": None,
        "reason": "Insight service returned HTTP 503",
    }
    assert resp.json()["context"]["event_id"] == event_id


def test_malformed_insight_is_rejected(client, admin_token):
    event_id = create_event(client, admin_token)
    use_provider(StubProvider(result={"confidence_score": 3}))

    resp = client.post("/ai/predict", json={"event_id": event_id}, headers=auth_header(admin_token))

    assert resp.json()["prediction"]["status"] == "unavailable"


def test_slow_provider_times_out(client, admin_token):
    event_id = create_event(client, admin_token)
    use_provider(StubProvider(result=PREDICTION, delay=1), timeout=0.05)

    resp = client.post("/ai/predict", json={"event_id": event_id}, headers=auth_header(admin_token))

    assert resp.json()["prediction"] == {
        "status": "unavailable",
        "insight": None,
        "reason": "Insight service timed out",
    }


def test_unconfigured_provider(client, admin_token):
    use_provider(NullInsightProvider())
    resp = client.get("/ai/trends", headers=auth_header(admin_token))

    assert resp.status_code == 200
    assert resp.json()["analysis"]["status"] == "unavailable"
    assert resp.json()["stats"]["total_events"] == 0


def test_trends_and_forecast(client, admin_token):
    event_id = create_event(client, admin_token)
    register(client, event_id, "ann@example.com", department="Sales")

    use_provider(StubProvider(result={
        "activeDepartments": ["Sales"],
        "trends": "Steady",
        "recommendations": ["a", "b", "c"],
    }))
    trends = client.get("/ai/trends", headers=auth_header(admin_token)).json()
    assert trends["analysis"]["insight"]["activeDepartments"] == ["Sales"]
    assert trends["stats"]["total_registrations"] == 1

    provider = StubProvider(result={"predictedCount": 12, "reasoning": "Similar to the last one"})
    use_provider(provider)
    forecast = client.post(
        "/ai/forecast",
        json={"title": "Next workshop", "capacity": 30},
        headers=auth_header(admin_token)
    ).json()
    assert forecast["forecast"]["insight"] == {"predictedCount": 12.0, "reasoning": "Similar to the last one"}
    feature, context = provider.calls[0]
    assert feature == "forecast"
    assert context["event"]["title"] == "Next workshop"
    assert [e["id"] for e in context["past_events"]] == [event_id]


def test_forecast_is_admin_only(client):
    use_provider(StubProvider(result={}))
    token = signup(client, "jane@example.com")["token"]
    resp = client.post("/ai/forecast", json={"title": "x"}, headers=auth_header(token))
    assert resp.status_code == 403


def gemini_reply(payload, status_code=200):
    body = {"candidates": [{"content": {"parts": [{"text": payload}]}}]}
    return httpx.Response(status_code, json=body)


@pytest.mark.anyio
async def test_gemini_provider_posts_schema_constrained_request():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers["x-goog-api-key"]
        seen["body"] = json.loads(request.content)
        return gemini_reply(json.dumps(PREDICTION))

    provider = GeminiInsightProvider(
        "secret",
        model="test-model",
        base_url="https://ai.example.com/v1",
        transport=httpx.MockTransport(handler)
    )

    result = await provider.generate("predict_attendance", {"event_id": "e1"})

    assert result == PREDICTION
    assert seen["url"] == "https://ai.example.com/v1/models/test-model:generateContent"
    assert seen["key"] == "secret"
    config = seen["body"]["generationConfig"]
    assert config["responseMimeType"] == "application/json"
    assert "predicted_attendance_count" in config["responseSchema"]["properties"]


@pytest.mark.anyio
@pytest.mark.parametrize("reply", [
    httpx.Response(500, json={"error": "boom"}),
    gemini_reply("not json"),
    gemini_reply("[1, 2]"),
    httpx.Response(200, json={"candidates": []}),
])
async def test_gemini_provider_bad_replies(reply):
    provider = GeminiInsightProvider(
        "secret",
        base_url="https://ai.example.com/v1",
        transport=httpx.MockTransport(lambda request: reply)
    )

    with pytest.raises(UpstreamServiceError):
        await provider.generate("forecast", {})
