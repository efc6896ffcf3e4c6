"""Pydantic schemas package."""

from .ballot import (
    BallotCreate,
    BallotRead,
    DelegateRequest,
    GrantRightRequest,
    ProposalRead,
    VoteRequest,
    VoterRead,
    WinnerRead,
)

__all__ = [
    "BallotCreate",
    "BallotRead",
    "DelegateRequest",
    "GrantRightRequest",
    "ProposalRead",
    "VoteRequest",
    "VoterRead",
    "WinnerRead",
]
