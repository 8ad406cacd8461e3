"""Tests for structured logging and request_id propagation."""

import json
import logging

from whosolder.core.logging import JsonFormatter, PrettyFormatter, latency_bucket_ms, log_event


def test_request_id_in_response_and_logs(client, caplog):
    with caplog.at_level(logging.INFO, logger="whosolder"):
        response = client.get("/healthz")
    rid = response.headers.get("x-request-id")
    assert rid
    records = [r for r in caplog.records if getattr(r, "request_id", None) == rid]
    assert records, "Expected logs to contain request_id from response"
    assert any(r.getMessage() == "request.complete" for r in records)


def test_score_events_logged(client, caplog):
    today = client.get("/api/today").json()
    with caplog.at_level(logging.INFO, logger="whosolder"):
        client.post(
            "/api/score",
            json={"date": today["date"], "answers": ["x"] * 10, "sig": "A" * 43 + "=", "clientId": "p1"},
        )
    rejected = [r for r in caplog.records if r.getMessage() == "score.rejected"]
    assert rejected
    assert rejected[0].error_code == "invalid_signature"
    assert rejected[0].play_date == today["date"]


def test_json_formatter_includes_structured_fields():
    record = logging.LogRecord("whosolder", logging.INFO, __file__, 1, "score.recorded", None, None)
    record.request_id = "rid-1"
    record.client_id = "c1"
    record.play_date = "2025-11-20"
    record.event_type = "score"

    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "score.recorded"
    assert payload["request_id"] == "rid-1"
    assert payload["client_id"] == "c1"
    assert payload["play_date"] == "2025-11-20"
    assert "error_code" not in payload


def test_pretty_formatter_prefix():
    record = logging.LogRecord("whosolder", logging.WARNING, __file__, 1, "hello", None, None)
    record.request_id = "rid-2"
    line = PrettyFormatter().format(record)
    assert "[whosolder] [rid=rid-2] hello" in line


def test_log_event_truncates_extras(caplog):
    with caplog.at_level(logging.INFO, logger="whosolder"):
        log_event("info", "client.error", extra={"stack": "x" * 2000})
    record = [r for r in caplog.records if r.getMessage() == "client.error"][-1]
    assert record.stack.endswith("...<truncated>")
    assert len(record.stack) < 600


def test_latency_buckets():
    assert latency_bucket_ms(None) == "unknown"
    assert latency_bucket_ms(5) == "<10ms"
    assert latency_bucket_ms(250) == "100-500ms"
    assert latency_bucket_ms(5000) == ">=1000ms"
