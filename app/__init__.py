"""Ballot service: delegated single-election voting."""

from .services.ballot import BallotEngine

__all__ = ["BallotEngine"]
