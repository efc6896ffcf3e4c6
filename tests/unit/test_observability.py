from __future__ import annotations

import json
import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from opentelemetry import trace

from app.core.config import Settings
from app.obs import (
    BALLOT_OPERATION_COUNTER,
    AuditMiddleware,
    PrometheusMiddleware,
    initialise_tracing,
    metrics_router,
    operation_span,
    record_ballot_operation,
)


def _counter_value(operation: str, outcome: str) -> float:
    sample_family = next(iter(BALLOT_OPERATION_COUNTER.collect()))
    for sample in sample_family.samples:
        if (
            sample.name.endswith("_total")
            and sample.labels.get("operation") == operation
            and sample.labels.get("outcome") == outcome
        ):
            return sample.value
    return 0.0


def test_metrics_endpoint_exposes_counters() -> None:
    app = FastAPI()
    app.add_middleware(PrometheusMiddleware)
    app.include_router(metrics_router)

    client = TestClient(app)
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert "ballot_operations_total" in response.text


def test_record_ballot_operation_increments_by_outcome() -> None:
    before = _counter_value("delegate", "DelegationCycle")
    record_ballot_operation("delegate", "DelegationCycle")
    assert _counter_value("delegate", "DelegationCycle") == before + 1


def test_operation_span_names_and_tags_span() -> None:
    initialise_tracing(service_name="unit-test-service", instrument_logging=False)
    with operation_span("vote", id="ballot-1", caller="alice", missing=None) as span:
        assert span.name == "ballot.vote"
        assert span.attributes["ballot.caller"] == "alice"
        assert "ballot.missing" not in span.attributes
        assert trace.get_current_span() is span


def test_audit_middleware_logs_mutating_requests(caplog: pytest.LogCaptureFixture) -> None:
    app = FastAPI()
    app.add_middleware(AuditMiddleware, settings=Settings(enable_tracing=False))

    @app.post("/echo")
    def echo(payload: dict) -> dict:
        return payload

    @app.get("/ping")
    def ping() -> dict[str, str]:
        return {"status": "ok"}

    client = TestClient(app)
    with caplog.at_level(logging.INFO, logger="audit"):
        posted = client.post("/echo", json={"to": "bob"}, headers={"X-Principal": "alice"})
        client.get("/ping")

    assert posted.status_code == 200
    assert posted.json() == {"to": "bob"}
    assert "X-Request-ID" in posted.headers

    records = [json.loads(record.getMessage()) for record in caplog.records if record.name == "audit"]
    assert len(records) == 1
    assert records[0]["principal"] == "alice"
    assert records[0]["method"] == "POST"
    assert records[0]["body"] == {"to": "bob"}
