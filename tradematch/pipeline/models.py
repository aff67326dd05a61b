"""Data models for feed pipeline runs."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from tradematch.ranking.models import FeedRow


@dataclass
class FeedRunResult:
    """
    Result of building one candidate's job feed.

    Attributes:
        candidate_id: Candidate the feed was built for
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        rows: Ranked rows that passed the filters
        total_jobs: Jobs handed to the pipeline
        scored_count: Rows with an internal score
        external_count: Rows with an external score
        failed_count: Rows whose internal scoring raised
        returned_count: Rows left after filtering
        duration_seconds: Time for the whole run
    """

    candidate_id: str
    run_started_at: datetime
    run_finished_at: datetime
    rows: List[FeedRow] = field(default_factory=list)
    total_jobs: int = 0
    scored_count: int = 0
    external_count: int = 0
    failed_count: int = 0
    returned_count: int = 0
    duration_seconds: float = 0.0

    def __post_init__(self):
        if not self.returned_count:
            self.returned_count = len(self.rows)

        if self.duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.duration_seconds = delta.total_seconds()

    @property
    def had_errors(self) -> bool:
        return self.failed_count > 0
