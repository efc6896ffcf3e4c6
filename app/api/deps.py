"""Common dependencies for API routes."""
from __future__ import annotations

from fastapi import HTTPException, Request, status

from app.core.config import get_settings
from app.schemas.ballot import PRINCIPAL_MAX_LENGTH
from app.services.registry import BallotRegistry, ballot_registry


def get_ballot_registry() -> BallotRegistry:
    """Return the process-wide ballot registry."""

    return ballot_registry


def get_principal(request: Request) -> str:
    """Read the caller principal placed on the request by the authenticating gateway."""

    header = get_settings().principal_header
    principal = (request.headers.get(header) or "").strip()
    if not principal:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {header} header",
        )
    if len(principal) > PRINCIPAL_MAX_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{header} header exceeds {PRINCIPAL_MAX_LENGTH} characters",
        )
    return principal


__all__ = ["get_ballot_registry", "get_principal"]
