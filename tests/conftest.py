from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("ENABLE_TRACING", "false")

from app.api.deps import get_ballot_registry
from app.main import app
from app.services.ballot import BallotEngine
from app.services.registry import BallotRegistry

PROPOSALS = [b"P0", b"P1", b"P2"]
CHAIR = "chair"


@pytest.fixture()
def engine() -> BallotEngine:
    return BallotEngine(PROPOSALS, CHAIR)


@pytest.fixture()
def registry() -> BallotRegistry:
    return BallotRegistry()


@pytest.fixture()
def client(registry: BallotRegistry) -> Iterator[TestClient]:
    app.dependency_overrides[get_ballot_registry] = lambda: registry

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_ballot_registry, None)


def principal_headers(principal: str) -> dict[str, str]:
    return {"X-Principal": principal}


@pytest.fixture()
def ballot_id(client: TestClient) -> str:
    response = client.post(
        "/api/ballots",
        json={"proposal_names": ["P0", "P1", "P2"]},
        headers=principal_headers(CHAIR),
    )
    assert response.status_code == 201
    return response.json()["id"]
