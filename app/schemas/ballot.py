"""Schemas for ballot endpoints."""
from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from app.services.ballot import PROPOSAL_NAME_MAX_BYTES, ProposalView, VoterView


PRINCIPAL_MAX_LENGTH = 128


def decode_label(label: bytes) -> str:
    return label.rstrip(b"\x00").decode("utf-8", errors="replace")


class BallotCreate(BaseModel):
    proposal_names: list[str] = Field(..., min_length=1)

    @field_validator("proposal_names")
    @classmethod
    def _names_fit_label(cls, names: list[str]) -> list[str]:
        for name in names:
            if len(name.encode("utf-8")) > PROPOSAL_NAME_MAX_BYTES:
                raise ValueError(f"proposal name '{name}' exceeds {PROPOSAL_NAME_MAX_BYTES} bytes")
        return names

    def encoded_names(self) -> list[bytes]:
        return [name.encode("utf-8") for name in self.proposal_names]


class GrantRightRequest(BaseModel):
    voter: str = Field(..., min_length=1, max_length=PRINCIPAL_MAX_LENGTH)


class DelegateRequest(BaseModel):
    to: str = Field(..., min_length=1, max_length=PRINCIPAL_MAX_LENGTH)


class VoteRequest(BaseModel):
    proposal: int


class ProposalRead(BaseModel):
    index: int
    name: str
    name_hex: str
    vote_count: int

    @classmethod
    def from_view(cls, index: int, view: ProposalView) -> "ProposalRead":
        return cls(
            index=index,
            name=decode_label(view.name),
            name_hex=view.name.hex(),
            vote_count=view.vote_count,
        )


class VoterRead(BaseModel):
    principal: str
    delegate: str | None = None
    vote: int | None = None
    weight: int
    voted: bool
    has_right_to_vote: bool

    @classmethod
    def from_view(cls, principal: str, view: VoterView) -> "VoterRead":
        return cls(
            principal=principal,
            delegate=view.delegate,
            vote=view.vote,
            weight=view.weight,
            voted=view.voted,
            has_right_to_vote=view.has_right_to_vote,
        )


class WinnerRead(BaseModel):
    index: int
    name: str
    vote_count: int


class BallotRead(BaseModel):
    id: str
    chairperson: str
    voter_count: int
    proposals: list[ProposalRead]
    winner: WinnerRead


__all__ = [
    "BallotCreate",
    "PRINCIPAL_MAX_LENGTH",
    "BallotRead",
    "DelegateRequest",
    "GrantRightRequest",
    "ProposalRead",
    "VoteRequest",
    "VoterRead",
    "WinnerRead",
    "decode_label",
]
