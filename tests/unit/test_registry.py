from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from app.services.ballot import AlreadyVotedError
from app.services.registry import BallotNotFoundError, BallotRegistry


def test_create_returns_distinct_ballots(registry: BallotRegistry) -> None:
    first = registry.create([b"yes", b"no"], "chair")
    second = registry.create([b"yes", b"no"], "other-chair")

    assert first != second
    assert registry.count() == 2
    assert registry.get(first).chairperson == "chair"
    assert registry.get(second).chairperson == "other-chair"


def test_unknown_ballot_raises(registry: BallotRegistry) -> None:
    with pytest.raises(BallotNotFoundError):
        registry.get("missing")
    with pytest.raises(BallotNotFoundError):
        with registry.transact("missing"):
            pass


def test_transact_propagates_engine_errors(registry: BallotRegistry) -> None:
    ballot_id = registry.create([b"yes", b"no"], "chair")
    with registry.transact(ballot_id) as engine:
        engine.vote("chair", 0)

    with pytest.raises(AlreadyVotedError):
        with registry.transact(ballot_id) as engine:
            engine.vote("chair", 1)

    assert registry.get(ballot_id).proposal(0).vote_count == 1


def test_transact_serializes_concurrent_votes(registry: BallotRegistry) -> None:
    ballot_id = registry.create([b"yes", b"no"], "chair")
    voters = [f"voter-{index}" for index in range(50)]
    with registry.transact(ballot_id) as engine:
        for voter in voters:
            engine.grant_right("chair", voter)

    def cast(voter: str) -> None:
        with registry.transact(ballot_id) as engine:
            engine.vote(voter, 1)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(cast, voters))

    assert registry.get(ballot_id).proposal(1).vote_count == 50


def test_reset_clears_ballots(registry: BallotRegistry) -> None:
    registry.create([b"yes"], "chair")
    registry.reset()
    assert registry.count() == 0
