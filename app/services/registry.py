"""In-memory registry hosting ballot engines and serializing their operations."""
from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from uuid import uuid4

from app.services.ballot import BallotEngine, BallotError, Principal


class BallotNotFoundError(BallotError):
    """Raised when the ballot identifier is unknown to the registry."""

    code = "BallotNotFound"


@dataclass(slots=True)
class _BallotEntry:
    engine: BallotEngine
    lock: Lock = field(default_factory=Lock)


class BallotRegistry:
    """Thread-safe table of ballots used by the API and tests."""

    def __init__(self) -> None:
        self._ballots: dict[str, _BallotEntry] = {}
        self._lock = Lock()

    def create(self, proposal_names: Sequence[bytes], chairperson: Principal) -> str:
        engine = BallotEngine(proposal_names, chairperson)
        ballot_id = uuid4().hex
        with self._lock:
            self._ballots[ballot_id] = _BallotEntry(engine=engine)
        return ballot_id

    def get(self, ballot_id: str) -> BallotEngine:
        return self._entry(ballot_id).engine

    @contextmanager
    def transact(self, ballot_id: str) -> Iterator[BallotEngine]:
        """Hold the ballot's lock for the duration of a single operation."""

        entry = self._entry(ballot_id)
        with entry.lock:
            yield entry.engine

    def count(self) -> int:
        with self._lock:
            return len(self._ballots)

    def reset(self) -> None:
        with self._lock:
            self._ballots.clear()

    def _entry(self, ballot_id: str) -> _BallotEntry:
        with self._lock:
            entry = self._ballots.get(ballot_id)
        if entry is None:
            raise BallotNotFoundError(f"Ballot '{ballot_id}' was not found")
        return entry


ballot_registry = BallotRegistry()


__all__ = ["BallotNotFoundError", "BallotRegistry", "ballot_registry"]
