"""Audit logging middleware for ballot requests."""
from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Callable
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from app.core.config import Settings

_MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


@dataclass(slots=True)
class AuditLogRecord:
    """Structured log entry emitted by the middleware."""

    timestamp: str
    request_id: str
    method: str
    path: str
    status: int
    duration_ms: float
    principal: str | None
    ip_address: str | None
    body: Any

    def to_json(self) -> str:
        payload = asdict(self)
        payload["duration_ms"] = round(self.duration_ms, 2)
        return json.dumps(payload, default=str)

    def to_dict(self) -> dict[str, Any]:
        return json.loads(self.to_json())


class AuditMiddleware(BaseHTTPMiddleware):
    """Starlette middleware recording who changed which ballot, and how it went."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        settings: Settings,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(app)
        self._settings = settings
        self._logger = logger or logging.getLogger("audit")

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()

        body: Any = None
        if request.method in _MUTATING_METHODS:
            body_bytes = await request.body()
            if body_bytes:
                try:
                    body = json.loads(body_bytes)
                except json.JSONDecodeError:
                    body = "<binary>"

        response = await call_next(request)

        if request.method in _MUTATING_METHODS:
            record = AuditLogRecord(
                timestamp=datetime.now(timezone.utc).isoformat(),
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=(time.perf_counter() - start) * 1000,
                principal=request.headers.get(self._settings.principal_header),
                ip_address=request.client.host if request.client else None,
                body=body,
            )
            self._logger.info(record.to_json())

        response.headers["X-Request-ID"] = request_id
        return response


__all__ = ["AuditLogRecord", "AuditMiddleware"]
