import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from task_suggestion.config import Settings
from task_suggestion.main import create_app, get_task_matcher
from task_suggestion.matcher import TaskMatcher
from task_suggestion.retry import RetryExecutor, RetryPolicy


def make_payload(**overrides):
    payload = {
        "utterance": "forgot password",
        "userId": "12345",
        "sessionId": "abcde-67890",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(failure_rate=0.0, trace_log_path=tmp_path / "trace.jsonl")


@pytest.fixture
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))


@pytest.mark.parametrize(
    "utterance, expected",
    [
        ("forgot password", "ResetPasswordTask"),
        ("track order", "CheckOrderStatusTask"),
        ("I can't remember my password", "ResetPasswordTask"),
        ("xyz unrelated text", "NoTaskFound"),
    ],
)
def test_suggest_task_returns_matched_task(client, utterance, expected):
    response = client.post("/suggestTask", json=make_payload(utterance=utterance))
    assert response.status_code == 200
    body = response.json()
    assert body["task"] == expected
    returned_at = datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))
    assert abs(datetime.now(timezone.utc) - returned_at) < timedelta(minutes=1)


def test_alias_route_behaves_the_same(client):
    response = client.post("/api/TaskSuggestion/suggestTask", json=make_payload(utterance="check order"))
    assert response.status_code == 200
    assert response.json()["task"] == "CheckOrderStatusTask"


def test_empty_utterance_is_a_validation_error(client):
    response = client.post("/suggestTask", json=make_payload(utterance=""))
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    assert any("Utterance is required" in error for error in body["errors"])


def test_missing_user_id_is_rejected(client):
    payload = make_payload()
    del payload["userId"]
    response = client.post("/suggestTask", json=payload)
    assert response.status_code == 400
    assert any("UserId is required" in error for error in response.json()["errors"])


def test_future_timestamp_is_rejected(client):
    future = (datetime.now(timezone.utc) + timedelta(minutes=10)).isoformat()
    response = client.post("/suggestTask", json=make_payload(timestamp=future))
    assert response.status_code == 400
    assert "Timestamp must be a valid date and time." in response.json()["errors"]


def test_malformed_json_is_bad_request(client):
    response = client.post(
        "/suggestTask", content="{ invalid json }", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Validation failed"


def test_wrongly_typed_field_is_bad_request(client):
    response = client.post("/suggestTask", json=make_payload(timestamp="not a date"))
    assert response.status_code == 400
    assert any(error.startswith("timestamp") for error in response.json()["errors"])


def test_null_body_is_bad_request(client):
    response = client.post("/suggestTask", content="null", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {
        "message": "Request body is required",
        "errors": ["Request body cannot be null"],
    }


def test_exhausted_retries_return_opaque_server_error(settings):
    app = create_app(settings)
    app.dependency_overrides[get_task_matcher] = lambda: TaskMatcher(
        executor=RetryExecutor(RetryPolicy(base_delay_seconds=0)),
        failure_injector=lambda: True,
    )
    response = TestClient(app).post("/suggestTask", json=make_payload())
    assert response.status_code == 500
    assert response.json() == {
        "message": "An error occurred while processing your request",
        "errors": ["Internal server error"],
    }


def test_metrics_count_suggestions(client):
    client.post("/suggestTask", json=make_payload(utterance="reset password"))
    response = client.get("/metrics")
    assert response.status_code == 200
    assert 'task_suggestions_total{task="ResetPasswordTask"} 1.0' in response.text


def test_completed_requests_are_traced(client, settings):
    client.post("/suggestTask", json=make_payload(utterance="track order"))
    lines = settings.trace_log_path.read_text(encoding="utf-8").strip().splitlines()
    record = json.loads(lines[-1])
    assert record["event"] == "suggestion.completed"
    assert record["userId"] == "12345"
    assert record["task"] == "CheckOrderStatusTask"


def test_failed_attempts_are_counted(tmp_path):
    settings = Settings(failure_rate=1.0, backoff_base_ms=0, trace_log_path=tmp_path / "trace.jsonl")
    client = TestClient(create_app(settings))

    response = client.post("/suggestTask", json=make_payload())
    assert response.status_code == 500

    metrics = client.get("/metrics").text
    assert "task_match_retries_total 2.0" in metrics
    assert "task_match_exhausted_total 1.0" in metrics


def test_log_level_applies_on_every_app():
    create_app(Settings(failure_rate=0.0, log_level="WARNING"))
    assert logging.getLogger().level == logging.WARNING

    create_app(Settings(failure_rate=0.0, log_level="DEBUG"))
    assert logging.getLogger().level == logging.DEBUG
