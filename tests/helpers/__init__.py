"""Test helper utilities for TradeMatch engine tests."""

from .executors import InlineExecutor
from .factories import make_candidate, make_job, make_match, make_row, verified
from .stores import InMemoryApplicationStore, InMemoryInteractionStore

__all__ = [
    "InlineExecutor",
    "InMemoryInteractionStore",
    "InMemoryApplicationStore",
    "make_candidate",
    "make_job",
    "make_match",
    "make_row",
    "verified",
]
