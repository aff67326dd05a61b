"""Feed pipeline: merge lifecycle state, score every job, then rank."""

import contextvars
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Mapping, Optional, Tuple, Union
from uuid import uuid4

from tradematch.domain.models import (
    Application,
    CandidateProfile,
    Interaction,
    JobRequirement,
)
from tradematch.lifecycle.protocols import ExternalScorer
from tradematch.logging import get_logger
from tradematch.logging.context import log_context
from tradematch.matching.engine import MatchScorer
from tradematch.matching.models import MatchResult
from tradematch.matching.utils import external_match_from_interaction
from tradematch.ranking.models import FeedRow, FilterSpec, SortOrder
from tradematch.ranking.service import rank
from tradematch.utils.timestamps import utc_now

from .models import FeedRunResult

logger = get_logger(__name__, component="pipeline")

State = Union[Interaction, Application]


class CandidateFeedPipeline:
    """
    Builds the ranked job list one candidate sees.

    Each job is joined with the candidate's interaction or application,
    scored by the internal scorer, paired with an external score when one
    exists, and finally filtered and sorted. Scoring calls are independent,
    so they run on a thread pool when ``max_workers`` is above 1; ranking
    always happens once, on the calling thread.
    """

    def __init__(
        self,
        scorer: Optional[MatchScorer] = None,
        external_scorer: Optional[ExternalScorer] = None,
        max_workers: int = 1,
        default_sort: SortOrder = SortOrder.POSTED,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """
        Initialize the feed pipeline.

        Args:
            scorer: Internal scorer (creates default if None)
            external_scorer: Optional outside scorer consulted when no cached score exists
            max_workers: Scoring threads (1 scores inline)
            default_sort: Sort applied when run() gets no filters
            logger_instance: Logger instance (uses module logger if None)
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.scorer = scorer or MatchScorer()
        self.external_scorer = external_scorer
        self.max_workers = max_workers
        self.default_sort = SortOrder(default_sort)
        self.logger = logger_instance or logger

    def run(
        self,
        candidate: CandidateProfile,
        jobs: Iterable[JobRequirement],
        filters: Optional[FilterSpec] = None,
        interactions: Optional[Mapping[str, State]] = None,
        external_scores: Optional[Mapping[str, MatchResult]] = None,
        applications: Optional[Mapping[str, Application]] = None,
    ) -> FeedRunResult:
        """
        Build, score and rank the feed.

        Args:
            candidate: Candidate viewing the feed
            jobs: Postings to consider
            filters: Filters and sort key (defaults to no filters and the default sort)
            interactions: Interaction records keyed by job id
            external_scores: Precomputed external scores keyed by job id
            applications: Application records keyed by job id

        Returns:
            FeedRunResult with ranked rows and counts

        Raises:
            No exceptions are raised for per-job scoring failures; those rows
            are left unscored and counted in failed_count.
        """
        run_started_at = utc_now()
        jobs = list(jobs)
        filters = filters or FilterSpec(sort_by=self.default_sort)
        interactions = interactions or {}
        external_scores = external_scores or {}
        applications = applications or {}

        with log_context(run_id=uuid4().hex, candidate_id=candidate.id):
            self.logger.info(
                f"Building feed over {len(jobs)} jobs",
                extra={
                    "event": "feed.run.started",
                    "job_count": len(jobs),
                    "max_workers": self.max_workers,
                    "sort_by": filters.sort_by.value,
                },
            )

            def build(job: JobRequirement) -> Tuple[FeedRow, bool]:
                state = applications.get(job.id) or interactions.get(job.id)
                return self._build_row(candidate, job, state, external_scores.get(job.id))

            if self.max_workers > 1 and len(jobs) > 1:
                with ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix="feed-scorer"
                ) as executor:
                    # Each job gets its own copy so log context reaches the workers
                    futures = [
                        executor.submit(contextvars.copy_context().run, build, job)
                        for job in jobs
                    ]
                    built = [future.result() for future in futures]
            else:
                built = [build(job) for job in jobs]

            rows: List[FeedRow] = [row for row, _ in built]
            ranked = rank(rows, filters)

            result = FeedRunResult(
                candidate_id=candidate.id,
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                rows=ranked,
                total_jobs=len(jobs),
                scored_count=sum(1 for row in rows if row.match is not None),
                external_count=sum(1 for row in rows if row.external_match is not None),
                failed_count=sum(1 for _, failed in built if failed),
                returned_count=len(ranked),
            )

            self.logger.info(
                "Feed built",
                extra={
                    "event": "feed.run.completed",
                    "duration_ms": int(result.duration_seconds * 1000),
                    "total_jobs": result.total_jobs,
                    "scored": result.scored_count,
                    "external": result.external_count,
                    "failed": result.failed_count,
                    "returned": result.returned_count,
                },
            )

            return result

    def _build_row(
        self,
        candidate: CandidateProfile,
        job: JobRequirement,
        state: Optional[State],
        explicit_external: Optional[MatchResult],
    ) -> Tuple[FeedRow, bool]:
        """Score one job. Returns the row and whether internal scoring failed."""
        failed = False
        try:
            match = self.scorer.score(candidate, job)
        except Exception as e:
            # Row stays unscored; the rest of the feed carries on
            self.logger.error(
                f"Scoring failed for job {job.id}: {e}",
                exc_info=True,
                extra={
                    "event": "feed.row.score_failed",
                    "job_id": job.id,
                    "error_type": type(e).__name__,
                },
            )
            match = None
            failed = True

        external = explicit_external
        if external is None and isinstance(state, Interaction):
            external = external_match_from_interaction(state)
        if external is None and self.external_scorer is not None:
            external = self._external_score(candidate, job)

        return FeedRow(job=job, match=match, external_match=external, state=state), failed

    def _external_score(
        self, candidate: CandidateProfile, job: JobRequirement
    ) -> Optional[MatchResult]:
        try:
            return self.external_scorer.score(candidate, job)
        except Exception as e:
            self.logger.warning(
                f"External scorer failed for job {job.id}: {e}",
                extra={
                    "event": "feed.row.external_failed",
                    "job_id": job.id,
                    "error_type": type(e).__name__,
                },
            )
            return None
