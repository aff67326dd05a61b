"""Interfaces the engine depends on but does not implement.

The state store, the external AI scorer and the notification transport are
injected. ``tradematch.persistence`` ships SQLAlchemy stores; the other two
are supplied by the host application.
"""

from typing import TYPE_CHECKING, Optional, Protocol

from tradematch.domain.models import (
    Application,
    CandidateProfile,
    Interaction,
    InteractionStatus,
    JobRequirement,
)
from tradematch.matching.models import MatchResult

if TYPE_CHECKING:
    from tradematch.notifications.models import ApplicationNotice, StatusNotification


class InteractionStore(Protocol):
    """Storage for interaction records, one per (candidate_id, job_id)."""

    def get(self, candidate_id: str, job_id: str) -> Optional[Interaction]:
        ...

    def insert(self, interaction: Interaction) -> bool:
        """Insert a new record.

        Returns:
            False if a record for the pair already exists (nothing written)
        """
        ...

    def compare_and_set(
        self, interaction: Interaction, expected_status: InteractionStatus
    ) -> bool:
        """Write ``interaction`` only if the stored status is still ``expected_status``.

        Returns:
            True if written, False if the stored status had changed
        """
        ...


class ApplicationStore(Protocol):
    """Storage for application records, unique per (candidate_id, job_id)."""

    def get(self, application_id: str) -> Optional[Application]:
        ...

    def get_by_pair(self, candidate_id: str, job_id: str) -> Optional[Application]:
        ...

    def insert(self, application: Application) -> None:
        """Insert a new record.

        Raises:
            DuplicateApplicationError: If a record for the pair already exists
        """
        ...

    def update(self, application: Application) -> None:
        ...


class ExternalScorer(Protocol):
    """An outside scorer (e.g. the AI matcher) whose score takes display precedence."""

    def score(self, candidate: CandidateProfile, job: JobRequirement) -> Optional[MatchResult]:
        ...


class NotificationDispatcher(Protocol):
    """Delivers notifications. Raising means delivery failed."""

    def dispatch(self, notification: "StatusNotification") -> None:
        """Tell the candidate their application changed status."""
        ...

    def dispatch_application(self, notice: "ApplicationNotice") -> None:
        """Tell the employer a candidate applied.

        Optional; dispatchers without it skip employer notices.
        """
        ...
