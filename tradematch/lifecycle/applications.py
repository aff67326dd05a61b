"""State machine for formal applications to first-party postings.

Employers may move an application between any of the pipeline stages
(reviewing, interview, offer, hired, rejected); ``new`` is only ever the
initial status. Each real status change sends the candidate exactly one
notification, dispatched after the new state is stored. A new application
sends the employer one notice instead; its delivery never fails the create.
"""

import logging
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional

from tradematch.domain.models import (
    Application,
    ApplicationStatus,
    CandidateProfile,
    JobRequirement,
)
from tradematch.logging import get_logger
from tradematch.logging.context import log_context
from tradematch.utils.timestamps import utc_now

from .exceptions import DuplicateApplicationError, InvalidTransitionError, NotFoundError
from .protocols import ApplicationStore

if TYPE_CHECKING:
    from tradematch.notifications.service import StatusNotifier

logger = get_logger(__name__, component="lifecycle")

# Statuses an employer can set; new is only ever assigned on create
TRANSITION_TARGETS = frozenset(
    {
        ApplicationStatus.REVIEWING,
        ApplicationStatus.INTERVIEW,
        ApplicationStatus.OFFER,
        ApplicationStatus.HIRED,
        ApplicationStatus.REJECTED,
    }
)


class ApplicationService:
    """Creates applications and moves them through the employer pipeline."""

    def __init__(
        self,
        store: ApplicationStore,
        notifier: "StatusNotifier",
        clock: Callable[[], datetime] = utc_now,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize ApplicationService.

        Args:
            store: Application store
            notifier: Notifier used after create and after each status change
            clock: Source of the current UTC time
            logger_instance: Optional logger instance (defaults to module logger)
        """
        self.store = store
        self.notifier = notifier
        self.clock = clock
        self.logger = logger_instance or logger

    def get(self, application_id: str) -> Optional[Application]:
        return self.store.get(application_id)

    def get_for_pair(self, candidate_id: str, job_id: str) -> Optional[Application]:
        return self.store.get_by_pair(candidate_id, job_id)

    def create(
        self,
        candidate_id: str,
        job_id: str,
        cover_message: Optional[str] = None,
        match_score: Optional[int] = None,
        candidate: Optional[CandidateProfile] = None,
        job: Optional[JobRequirement] = None,
    ) -> Application:
        """Submit an application and notify the employer.

        Args:
            candidate_id: Applying candidate
            job_id: First-party posting applied to
            cover_message: Optional message to the employer
            match_score: Display score at submission time, stored as a snapshot
            candidate: Applicant profile, summarized in the employer notice
            job: Posting applied to, titled in the employer notice

        Returns:
            The new application, in status new. The candidate gets no status
            notification.

        Raises:
            DuplicateApplicationError: If the candidate already applied to this job
        """
        with log_context(candidate_id=candidate_id, job_id=job_id):
            if self.store.get_by_pair(candidate_id, job_id) is not None:
                self._log_duplicate()
                raise DuplicateApplicationError(candidate_id, job_id)

            now = self.clock()
            application = Application(
                id=uuid.uuid4().hex,
                candidate_id=candidate_id,
                job_id=job_id,
                status=ApplicationStatus.NEW,
                match_score=match_score,
                cover_message=cover_message,
                created_at=now,
                updated_at=now,
            )

            try:
                self.store.insert(application)
            except DuplicateApplicationError:
                # Another submission for the pair landed between check and insert
                self._log_duplicate()
                raise

            self.logger.info(
                f"Application {application.id} created",
                extra={
                    "event": "application.created",
                    "application_id": application.id,
                    "match_score": match_score,
                },
            )

            try:
                self.notifier.notify_employer(application, candidate, job)
            except Exception as e:
                self.logger.warning(
                    f"Could not queue employer notice for application {application.id}: {e}",
                    extra={
                        "event": "notification.send.failure",
                        "application_id": application.id,
                        "kind": "application",
                        "error_type": type(e).__name__,
                    },
                )
            return application

    def transition(
        self,
        application_id: str,
        new_status: ApplicationStatus,
        notes: Optional[str] = None,
        rejection_reason: Optional[str] = None,
    ) -> Application:
        """Move an application to a new pipeline stage.

        Moving to the current status only stores ``notes`` and sends nothing.
        ``rejection_reason`` is kept only for rejections; leaving rejected
        clears it.

        Args:
            application_id: Application to move
            new_status: Target status (any stage except new)
            notes: Employer notes to store alongside the change
            rejection_reason: Feedback shown to the candidate on rejection

        Returns:
            The stored application after the change

        Raises:
            InvalidTransitionError: If new_status is new or not a known status
            NotFoundError: If no application has this id
        """
        current = self._require(application_id)
        target = self._target_status(current, new_status)

        with log_context(application_id=application_id):
            now = self.clock()

            if target == current.status:
                if notes is not None:
                    current = current.model_copy(update={"employer_notes": notes, "updated_at": now})
                    self.store.update(current)
                self.logger.debug(
                    f"Application {application_id} already {target.value}; no notification",
                    extra={"event": "application.noop", "status": target.value},
                )
                return current

            if rejection_reason is not None and target != ApplicationStatus.REJECTED:
                self.logger.warning(
                    f"Ignoring rejection reason for move to {target.value}",
                    extra={
                        "event": "application.rejection_reason.ignored",
                        "to_status": target.value,
                    },
                )

            reason = rejection_reason if target == ApplicationStatus.REJECTED else None
            changes = {"status": target, "rejection_reason": reason, "updated_at": now}
            if notes is not None:
                changes["employer_notes"] = notes

            updated = current.model_copy(update=changes)
            self.store.update(updated)

            self.logger.info(
                f"Application {application_id}: {current.status.value} -> {target.value}",
                extra={
                    "event": "application.status.changed",
                    "from_status": current.status.value,
                    "to_status": target.value,
                },
            )

            self.notifier.notify(application_id, target, reason)
            return updated

    def update_notes(self, application_id: str, notes: Optional[str]) -> Application:
        """Replace employer notes. Always allowed; never notifies.

        Raises:
            NotFoundError: If no application has this id
        """
        current = self._require(application_id)
        updated = current.model_copy(update={"employer_notes": notes, "updated_at": self.clock()})
        self.store.update(updated)

        self.logger.debug(
            f"Updated notes on application {application_id}",
            extra={"event": "application.notes.updated", "application_id": application_id},
        )
        return updated

    def _require(self, application_id: str) -> Application:
        application = self.store.get(application_id)
        if application is None:
            raise NotFoundError(f"Application {application_id} not found")
        return application

    @staticmethod
    def _target_status(current: Application, new_status) -> ApplicationStatus:
        try:
            target = ApplicationStatus(new_status)
        except ValueError:
            target = None

        if target not in TRANSITION_TARGETS:
            requested = getattr(new_status, "value", new_status)
            raise InvalidTransitionError(
                f"Cannot move application {current.id} to {requested!r}",
                current_status=current.status.value,
                requested_status=str(requested),
            )
        return target

    def _log_duplicate(self) -> None:
        self.logger.warning(
            "Rejected duplicate application",
            extra={"event": "application.duplicate"},
        )
