"""Rows and filter settings consumed by the list ranker."""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Union

from tradematch.domain.models import Application, Interaction, JobRequirement
from tradematch.matching.models import MatchResult
from tradematch.matching.utils import resolve_display_match

NEW_STATUS = "new"


class SortOrder(str, Enum):
    """Sort keys offered by job lists."""

    MATCH = "match"
    POSTED = "posted"
    PAY = "pay"


@dataclass
class FilterSpec:
    """Filters applied to a job list. Every set filter must pass.

    Attributes:
        query: Case-insensitive substring of title, employer name or location
        location: Case-insensitive substring of location
        source: Exact aggregator name; rows from other sources are dropped
        good_matches_only: Keep only rows whose display score is at least 70
        statuses: Keep only rows whose derived status is in this set
        active_only: Drop postings that are no longer active
        sort_by: Sort key (defaults to newest first)
    """

    query: Optional[str] = None
    location: Optional[str] = None
    source: Optional[str] = None
    good_matches_only: bool = False
    statuses: Optional[FrozenSet[str]] = None
    active_only: bool = False
    sort_by: SortOrder = SortOrder.POSTED

    def __post_init__(self):
        # Accept plain strings from config and CLI input
        self.sort_by = SortOrder(self.sort_by)
        if self.statuses is not None:
            self.statuses = frozenset(
                status.value if isinstance(status, Enum) else str(status)
                for status in self.statuses
            )


@dataclass
class FeedRow:
    """A job joined with its scores and the candidate's lifecycle record.

    Attributes:
        job: The posting
        match: Score from the internal scorer, if computed
        external_match: Score from the external AI scorer, if any
        state: Interaction (aggregated posting) or Application (first-party), if any
    """

    job: JobRequirement
    match: Optional[MatchResult] = None
    external_match: Optional[MatchResult] = None
    state: Optional[Union[Interaction, Application]] = None

    @property
    def display_match(self) -> Optional[MatchResult]:
        return resolve_display_match(self.match, self.external_match)

    @property
    def display_score(self) -> Optional[int]:
        result = self.display_match
        return result.score if result is not None else None

    @property
    def status(self) -> str:
        """Derived status: the record's status value, or "new" without one."""
        if self.state is None:
            return NEW_STATUS
        return self.state.status.value
