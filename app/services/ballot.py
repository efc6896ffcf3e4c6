"""Single-election ballot with delegated voting."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import NoReturn

LOGGER = logging.getLogger(__name__)

PROPOSAL_NAME_MAX_BYTES = 32

Principal = str


class BallotError(RuntimeError):
    """Base exception for ballot operation errors."""

    code = "BallotError"


class UnauthorizedError(BallotError):
    """Raised when a non-chairperson attempts a chairperson-only action."""

    code = "Unauthorized"


class AlreadyVotedError(BallotError):
    """Raised when the voter has already voted or delegated."""

    code = "AlreadyVoted"


class AlreadyHasRightsError(BallotError):
    """Raised when the voter already holds the right to vote."""

    code = "AlreadyHasRights"


class NoRightToVoteError(BallotError):
    """Raised when the caller has not been granted the right to vote."""

    code = "NoRightToVote"


class SelfDelegationError(BallotError):
    """Raised when a voter attempts to delegate to themselves."""

    code = "SelfDelegation"


class DelegationCycleError(BallotError):
    """Raised when a delegation would loop back to the delegator."""

    code = "DelegationCycle"


class DelegateHasNoRightError(BallotError):
    """Raised when the terminal delegate has no right to vote."""

    code = "DelegateHasNoRight"


class InvalidProposalError(BallotError):
    """Raised when a proposal index is outside the slate."""

    code = "InvalidProposal"


@dataclass(slots=True)
class Proposal:
    name: bytes
    vote_count: int = 0


@dataclass(slots=True)
class Voter:
    weight: int = 0
    voted: bool = False
    delegate: Principal | None = None
    vote: int | None = None
    has_right_to_vote: bool = False


@dataclass(slots=True, frozen=True)
class ProposalView:
    """Read-only copy of a proposal."""

    name: bytes
    vote_count: int


@dataclass(slots=True, frozen=True)
class VoterView:
    """Read-only copy of a voter record."""

    delegate: Principal | None
    vote: int | None
    weight: int
    voted: bool
    has_right_to_vote: bool


@dataclass(slots=True, frozen=True)
class BallotSnapshot:
    """Complete, comparable image of a ballot's state."""

    chairperson: Principal
    proposals: tuple[ProposalView, ...]
    voters: tuple[tuple[Principal, VoterView], ...]


_NO_VOTER = VoterView(delegate=None, vote=None, weight=0, voted=False, has_right_to_vote=False)


def _validate_proposal_names(proposal_names: Iterable[bytes]) -> list[bytes]:
    names = list(proposal_names)
    if not names:
        raise ValueError("A ballot requires at least one proposal")
    for name in names:
        if not isinstance(name, (bytes, bytearray)):
            raise ValueError(f"Proposal name must be bytes, got {type(name).__name__}")
        if len(name) > PROPOSAL_NAME_MAX_BYTES:
            raise ValueError(
                f"Proposal name exceeds {PROPOSAL_NAME_MAX_BYTES} bytes: {bytes(name)!r}"
            )
    return [bytes(name) for name in names]


class BallotEngine:
    """In-memory voting state machine for one election.

    The chairperson fixes the proposal slate at construction and grants
    voting rights. Rights-holders either vote directly or delegate their
    weight. Delegation chains are resolved when the delegation is made, so
    tallying the winner is a single pass over the proposals.

    Every operation validates all of its preconditions before touching state;
    a rejected call leaves the ballot exactly as it was. The engine performs
    no locking and expects its host to serialize calls.
    """

    def __init__(self, proposal_names: Sequence[bytes], chairperson: Principal) -> None:
        self._proposals = [Proposal(name=name) for name in _validate_proposal_names(proposal_names)]
        self._chairperson = chairperson
        self._voters: dict[Principal, Voter] = {
            chairperson: Voter(weight=1, has_right_to_vote=True)
        }

    @property
    def chairperson(self) -> Principal:
        return self._chairperson

    @property
    def proposal_count(self) -> int:
        return len(self._proposals)

    @property
    def voter_count(self) -> int:
        """Number of principals holding the right to vote."""
        return sum(1 for voter in self._voters.values() if voter.has_right_to_vote)

    def grant_right(self, caller: Principal, target: Principal) -> None:
        """Give ``target`` the right to vote. Only the chairperson may call this."""

        if caller != self._chairperson:
            self._reject(UnauthorizedError(f"'{caller}' is not the chairperson"))
        voter = self._voters.get(target)
        if voter is not None and voter.voted:
            self._reject(AlreadyVotedError(f"'{target}' has already voted"))
        if voter is not None and voter.has_right_to_vote:
            self._reject(AlreadyHasRightsError(f"'{target}' already has the right to vote"))

        if voter is None:
            voter = self._voters[target] = Voter()
        voter.has_right_to_vote = True
        voter.weight = 1
        LOGGER.info("voting right granted", extra={"voter": target})

    def delegate(self, caller: Principal, to: Principal) -> None:
        """Delegate the caller's weight to ``to``, resolving its delegation chain."""

        sender = self._voters.get(caller)
        if sender is not None and sender.voted:
            self._reject(AlreadyVotedError(f"'{caller}' has already voted"))
        if to == caller:
            self._reject(SelfDelegationError(f"'{caller}' cannot delegate to themselves"))
        if sender is None or not sender.has_right_to_vote:
            self._reject(NoRightToVoteError(f"'{caller}' has no right to vote"))

        target = self._resolve_terminal_delegate(caller, to)
        delegate = self._voters.get(target)
        if delegate is None or not delegate.has_right_to_vote:
            self._reject(DelegateHasNoRightError(f"Delegate '{target}' has no right to vote"))

        sender.voted = True
        sender.delegate = target
        if delegate.voted:
            self._proposals[delegate.vote].vote_count += sender.weight
        else:
            delegate.weight += sender.weight
        LOGGER.info(
            "vote delegated",
            extra={"voter": caller, "delegate": target, "weight": sender.weight},
        )

    def vote(self, caller: Principal, proposal_index: int) -> None:
        """Cast the caller's accumulated weight for ``proposal_index``."""

        voter = self._voters.get(caller)
        if voter is None or not voter.has_right_to_vote:
            self._reject(NoRightToVoteError(f"'{caller}' has no right to vote"))
        if voter.voted:
            self._reject(AlreadyVotedError(f"'{caller}' has already voted"))
        self._check_proposal_index(proposal_index)

        voter.voted = True
        voter.vote = proposal_index
        self._proposals[proposal_index].vote_count += voter.weight
        LOGGER.info(
            "vote cast",
            extra={"voter": caller, "proposal": proposal_index, "weight": voter.weight},
        )

    def winning_proposal(self) -> int:
        """Return the index of the leading proposal; ties go to the lowest index."""

        winning_index = 0
        winning_count = 0
        for index, proposal in enumerate(self._proposals):
            if proposal.vote_count > winning_count:
                winning_count = proposal.vote_count
                winning_index = index
        return winning_index

    def winner_name(self) -> bytes:
        return self._proposals[self.winning_proposal()].name

    def proposal(self, index: int) -> ProposalView:
        self._check_proposal_index(index)
        proposal = self._proposals[index]
        return ProposalView(name=proposal.name, vote_count=proposal.vote_count)

    def proposals(self) -> list[ProposalView]:
        return [ProposalView(name=item.name, vote_count=item.vote_count) for item in self._proposals]

    def voter(self, principal: Principal) -> VoterView:
        voter = self._voters.get(principal)
        if voter is None:
            return _NO_VOTER
        return VoterView(
            delegate=voter.delegate,
            vote=voter.vote,
            weight=voter.weight,
            voted=voter.voted,
            has_right_to_vote=voter.has_right_to_vote,
        )

    def delegated(self, principal: Principal) -> bool:
        return self.voter(principal).delegate is not None

    def directly_voted(self, principal: Principal) -> bool:
        view = self.voter(principal)
        return view.voted and view.delegate is None

    def snapshot(self) -> BallotSnapshot:
        return BallotSnapshot(
            chairperson=self._chairperson,
            proposals=tuple(self.proposals()),
            voters=tuple((principal, self.voter(principal)) for principal in sorted(self._voters)),
        )

    def _resolve_terminal_delegate(self, caller: Principal, to: Principal) -> Principal:
        # A valid chain visits each known voter at most once.
        target = to
        for _ in range(len(self._voters) + 1):
            voter = self._voters.get(target)
            if voter is None or voter.delegate is None:
                return target
            target = voter.delegate
            if target == caller:
                break
        self._reject(DelegationCycleError(f"Delegation from '{caller}' to '{to}' forms a cycle"))

    def _check_proposal_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._proposals):
            self._reject(InvalidProposalError(f"Proposal {index!r} does not exist"))

    @staticmethod
    def _reject(error: BallotError) -> NoReturn:
        LOGGER.debug("ballot operation rejected", extra={"code": error.code, "reason": str(error)})
        raise error


__all__ = [
    "AlreadyHasRightsError",
    "AlreadyVotedError",
    "BallotEngine",
    "BallotError",
    "BallotSnapshot",
    "DelegateHasNoRightError",
    "DelegationCycleError",
    "InvalidProposalError",
    "NoRightToVoteError",
    "PROPOSAL_NAME_MAX_BYTES",
    "Principal",
    "ProposalView",
    "SelfDelegationError",
    "UnauthorizedError",
    "VoterView",
]
