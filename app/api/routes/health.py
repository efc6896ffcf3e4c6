"""Health and readiness endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_ballot_registry
from app.core.config import get_settings
from app.obs import report_active_ballots
from app.services.registry import BallotRegistry

router = APIRouter()


@router.get("/healthz", summary="Liveness check")
def health_check() -> dict[str, str]:
    settings = get_settings()
    return {"status": "ok", "service": settings.app_name}


@router.get("/readyz", summary="Readiness check")
def readiness_check(registry: BallotRegistry = Depends(get_ballot_registry)) -> dict[str, str | int]:
    settings = get_settings()
    ballots = registry.count()
    report_active_ballots(ballots)
    return {"status": "ready", "service": settings.app_name, "ballots": ballots}
