"""Observability utilities."""

from .audit import AuditLogRecord, AuditMiddleware
from .metrics import (
    ACTIVE_BALLOTS_GAUGE,
    BALLOT_OPERATION_COUNTER,
    REQUEST_COUNTER,
    REQUEST_ERROR_COUNTER,
    REQUEST_LATENCY_SECONDS,
    PrometheusMiddleware,
    metrics_router,
    record_ballot_operation,
    report_active_ballots,
)
from .tracing import initialise_tracing, instrument_fastapi_app, operation_span

__all__ = [
    "ACTIVE_BALLOTS_GAUGE",
    "AuditLogRecord",
    "AuditMiddleware",
    "BALLOT_OPERATION_COUNTER",
    "PrometheusMiddleware",
    "REQUEST_COUNTER",
    "REQUEST_ERROR_COUNTER",
    "REQUEST_LATENCY_SECONDS",
    "metrics_router",
    "record_ballot_operation",
    "report_active_ballots",
    "initialise_tracing",
    "instrument_fastapi_app",
    "operation_span",
]
