"""Ballot endpoints: construction, rights, delegation, voting and tallies."""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_ballot_registry, get_principal
from app.obs import operation_span, record_ballot_operation, report_active_ballots
from app.schemas.ballot import (
    BallotCreate,
    BallotRead,
    DelegateRequest,
    GrantRightRequest,
    ProposalRead,
    VoteRequest,
    VoterRead,
    WinnerRead,
    decode_label,
)
from app.services.ballot import (
    AlreadyHasRightsError,
    AlreadyVotedError,
    BallotEngine,
    BallotError,
    DelegateHasNoRightError,
    DelegationCycleError,
    InvalidProposalError,
    NoRightToVoteError,
    SelfDelegationError,
    UnauthorizedError,
)
from app.services.registry import BallotNotFoundError, BallotRegistry

router = APIRouter(prefix="/ballots")

_ERROR_STATUS: dict[type[BallotError], int] = {
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    NoRightToVoteError: status.HTTP_403_FORBIDDEN,
    AlreadyVotedError: status.HTTP_409_CONFLICT,
    AlreadyHasRightsError: status.HTTP_409_CONFLICT,
    SelfDelegationError: status.HTTP_409_CONFLICT,
    DelegationCycleError: status.HTTP_409_CONFLICT,
    DelegateHasNoRightError: status.HTTP_409_CONFLICT,
    InvalidProposalError: status.HTTP_404_NOT_FOUND,
    BallotNotFoundError: status.HTTP_404_NOT_FOUND,
}


@contextmanager
def _ballot_operation(
    registry: BallotRegistry, ballot_id: str, operation: str, **attributes: Any
) -> Iterator[BallotEngine]:
    with operation_span(operation, id=ballot_id, **attributes):
        try:
            with registry.transact(ballot_id) as engine:
                yield engine
        except BallotError as exc:
            record_ballot_operation(operation, exc.code)
            raise HTTPException(
                status_code=_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST),
                detail={"code": exc.code, "message": str(exc)},
            ) from exc
    record_ballot_operation(operation)


def _winner(engine: BallotEngine) -> WinnerRead:
    index = engine.winning_proposal()
    return WinnerRead(
        index=index,
        name=decode_label(engine.winner_name()),
        vote_count=engine.proposal(index).vote_count,
    )


def _ballot_read(ballot_id: str, engine: BallotEngine) -> BallotRead:
    return BallotRead(
        id=ballot_id,
        chairperson=engine.chairperson,
        voter_count=engine.voter_count,
        proposals=[
            ProposalRead.from_view(index, view) for index, view in enumerate(engine.proposals())
        ],
        winner=_winner(engine),
    )


@router.post("", response_model=BallotRead, status_code=status.HTTP_201_CREATED)
def create_ballot(
    payload: BallotCreate,
    registry: BallotRegistry = Depends(get_ballot_registry),
    principal: str = Depends(get_principal),
) -> BallotRead:
    with operation_span("init", chairperson=principal, proposals=len(payload.proposal_names)):
        ballot_id = registry.create(payload.encoded_names(), principal)
    record_ballot_operation("init")
    report_active_ballots(registry.count())
    return _ballot_read(ballot_id, registry.get(ballot_id))


@router.get("/{ballot_id}", response_model=BallotRead)
def get_ballot(
    ballot_id: str,
    registry: BallotRegistry = Depends(get_ballot_registry),
) -> BallotRead:
    with _ballot_operation(registry, ballot_id, "summary") as engine:
        return _ballot_read(ballot_id, engine)


@router.post("/{ballot_id}/rights", response_model=VoterRead)
def grant_right(
    ballot_id: str,
    payload: GrantRightRequest,
    registry: BallotRegistry = Depends(get_ballot_registry),
    principal: str = Depends(get_principal),
) -> VoterRead:
    with _ballot_operation(registry, ballot_id, "grant_right", caller=principal) as engine:
        engine.grant_right(principal, payload.voter)
        return VoterRead.from_view(payload.voter, engine.voter(payload.voter))


@router.post("/{ballot_id}/delegate", response_model=VoterRead)
def delegate(
    ballot_id: str,
    payload: DelegateRequest,
    registry: BallotRegistry = Depends(get_ballot_registry),
    principal: str = Depends(get_principal),
) -> VoterRead:
    with _ballot_operation(registry, ballot_id, "delegate", caller=principal) as engine:
        engine.delegate(principal, payload.to)
        return VoterRead.from_view(principal, engine.voter(principal))


@router.post("/{ballot_id}/vote", response_model=ProposalRead)
def vote(
    ballot_id: str,
    payload: VoteRequest,
    registry: BallotRegistry = Depends(get_ballot_registry),
    principal: str = Depends(get_principal),
) -> ProposalRead:
    with _ballot_operation(registry, ballot_id, "vote", caller=principal) as engine:
        engine.vote(principal, payload.proposal)
        return ProposalRead.from_view(payload.proposal, engine.proposal(payload.proposal))


@router.get("/{ballot_id}/proposals/{index}", response_model=ProposalRead)
def get_proposal(
    ballot_id: str,
    index: int,
    registry: BallotRegistry = Depends(get_ballot_registry),
) -> ProposalRead:
    with _ballot_operation(registry, ballot_id, "proposal") as engine:
        return ProposalRead.from_view(index, engine.proposal(index))


@router.get("/{ballot_id}/voters/{principal}", response_model=VoterRead)
def get_voter(
    ballot_id: str,
    principal: str,
    registry: BallotRegistry = Depends(get_ballot_registry),
) -> VoterRead:
    with _ballot_operation(registry, ballot_id, "voter") as engine:
        return VoterRead.from_view(principal, engine.voter(principal))


@router.get("/{ballot_id}/winner", response_model=WinnerRead)
def get_winner(
    ballot_id: str,
    registry: BallotRegistry = Depends(get_ballot_registry),
) -> WinnerRead:
    with _ballot_operation(registry, ballot_id, "winning_proposal") as engine:
        return _winner(engine)


__all__ = [
    "create_ballot",
    "delegate",
    "get_ballot",
    "get_proposal",
    "get_voter",
    "get_winner",
    "grant_right",
    "router",
    "vote",
]
