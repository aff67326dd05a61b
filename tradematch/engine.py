"""MatchEngine: one object wiring scorer, ranker, state machines and notifier.

The engine holds no process-wide state. Stores, the dispatcher and the
optional external scorer are injected; ``from_config`` wires the SQLAlchemy
stores for hosts that want the bundled persistence.
"""

import logging
from concurrent.futures import Executor
from typing import Iterable, List, Mapping, Optional

from tradematch.config.models import EngineConfig
from tradematch.domain.models import (
    Application,
    CandidateProfile,
    Interaction,
    JobRequirement,
)
from tradematch.lifecycle.applications import ApplicationService
from tradematch.lifecycle.interactions import InteractionService
from tradematch.lifecycle.protocols import (
    ApplicationStore,
    ExternalScorer,
    InteractionStore,
    NotificationDispatcher,
)
from tradematch.logging import get_logger
from tradematch.matching.engine import MatchScorer
from tradematch.matching.models import MatchResult
from tradematch.matching.utils import external_match_from_interaction, resolve_display_match
from tradematch.notifications.service import StatusNotifier
from tradematch.pipeline.models import FeedRunResult
from tradematch.pipeline.runner import CandidateFeedPipeline
from tradematch.ranking.models import FeedRow, FilterSpec, SortOrder
from tradematch.ranking.service import rank

logger = get_logger(__name__, component="engine")


class MatchEngine:
    """Facade over the match and lifecycle components.

    Example:
        >>> engine = MatchEngine(interaction_store, application_store, dispatcher)
        >>> result = engine.score(candidate, job)
        >>> application = engine.apply(candidate, job, cover_message="Available now")
        >>> engine.close()
    """

    def __init__(
        self,
        interaction_store: InteractionStore,
        application_store: ApplicationStore,
        dispatcher: NotificationDispatcher,
        external_scorer: Optional[ExternalScorer] = None,
        config: Optional[EngineConfig] = None,
        notification_executor: Optional[Executor] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize MatchEngine.

        Args:
            interaction_store: Store for interaction records
            application_store: Store for application records
            dispatcher: Notification transport
            external_scorer: Optional outside scorer with display precedence
            config: Engine configuration (defaults if None)
            notification_executor: Executor for notification delivery (thread pool if None)
            logger_instance: Logger instance (uses module logger if None)
        """
        self.config = config or EngineConfig()
        self.logger = logger_instance or logger

        self.interaction_store = interaction_store
        self.application_store = application_store
        self.external_scorer = external_scorer

        self.scorer = MatchScorer()
        self.default_sort = SortOrder(self.config.ranking.default_sort)
        self.notifier = StatusNotifier(
            dispatcher, self.config.notifications, executor=notification_executor
        )
        self.interactions = InteractionService(
            interaction_store, cas_max_attempts=self.config.lifecycle.cas_max_attempts
        )
        self.applications = ApplicationService(application_store, self.notifier)
        self.pipeline = CandidateFeedPipeline(
            scorer=self.scorer,
            external_scorer=external_scorer,
            max_workers=self.config.scoring.max_workers,
            default_sort=self.default_sort,
        )

    @classmethod
    def from_config(
        cls,
        config: EngineConfig,
        dispatcher: NotificationDispatcher,
        database_url: Optional[str] = None,
        external_scorer: Optional[ExternalScorer] = None,
    ) -> "MatchEngine":
        """Build an engine backed by the SQLAlchemy stores.

        Args:
            config: Engine configuration
            dispatcher: Notification transport
            database_url: Initialize the database first when given
            external_scorer: Optional outside scorer

        Raises:
            DatabaseConnectionError: If the database cannot be initialized
        """
        from tradematch.persistence import SqlApplicationStore, SqlInteractionStore, init_database

        if database_url:
            init_database(database_url)

        return cls(
            interaction_store=SqlInteractionStore(),
            application_store=SqlApplicationStore(),
            dispatcher=dispatcher,
            external_scorer=external_scorer,
            config=config,
        )

    def score(self, candidate: CandidateProfile, job: JobRequirement) -> MatchResult:
        """Internal score for one candidate and job."""
        return self.scorer.score(candidate, job)

    def display_match(
        self,
        candidate: CandidateProfile,
        job: JobRequirement,
        interaction: Optional[Interaction] = None,
    ) -> Optional[MatchResult]:
        """The score a candidate would see for a job.

        A cached or freshly requested external score wins over the internal one.
        """
        external = external_match_from_interaction(interaction)
        if external is None and self.external_scorer is not None:
            try:
                external = self.external_scorer.score(candidate, job)
            except Exception as e:
                self.logger.warning(
                    f"External scorer failed for job {job.id}: {e}",
                    extra={"event": "engine.external_failed", "job_id": job.id},
                )

        return resolve_display_match(self.score(candidate, job), external)

    def rank(self, rows: Iterable[FeedRow], filters: Optional[FilterSpec] = None) -> List[FeedRow]:
        """Filter and sort rows; without filters the configured default sort applies."""
        return rank(rows, filters or FilterSpec(sort_by=self.default_sort))

    def build_feed(
        self,
        candidate: CandidateProfile,
        jobs: Iterable[JobRequirement],
        filters: Optional[FilterSpec] = None,
        interactions: Optional[Mapping[str, Interaction]] = None,
        external_scores: Optional[Mapping[str, MatchResult]] = None,
        applications: Optional[Mapping[str, Application]] = None,
    ) -> FeedRunResult:
        """Score and rank a candidate's feed.

        Lifecycle records not passed in are loaded from the stores when they
        support listing by candidate.
        """
        if interactions is None:
            interactions = self._records_by_job(self.interaction_store, candidate.id)
        if applications is None:
            applications = self._records_by_job(self.application_store, candidate.id)

        return self.pipeline.run(
            candidate,
            jobs,
            filters,
            interactions=interactions,
            external_scores=external_scores,
            applications=applications,
        )

    def apply(
        self,
        candidate: CandidateProfile,
        job: JobRequirement,
        cover_message: Optional[str] = None,
    ) -> Application:
        """Submit a formal application, snapshotting the display score.

        The employer is notified in the background.

        Raises:
            ValueError: If the job is an aggregated posting
            DuplicateApplicationError: If the candidate already applied
        """
        if job.is_external:
            raise ValueError(
                f"Job {job.id} comes from {job.source}; track it as an interaction instead"
            )

        display = self.display_match(candidate, job)
        return self.applications.create(
            candidate.id,
            job.id,
            cover_message=cover_message,
            match_score=display.score if display is not None else None,
            candidate=candidate,
            job=job,
        )

    def close(self) -> None:
        """Stop background notification delivery, waiting for queued messages."""
        self.notifier.shutdown(wait=True)

    def __enter__(self) -> "MatchEngine":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @staticmethod
    def _records_by_job(store, candidate_id: str) -> Optional[dict]:
        list_for_candidate = getattr(store, "list_for_candidate", None)
        if list_for_candidate is None:
            return None
        return {record.job_id: record for record in list_for_candidate(candidate_id)}
