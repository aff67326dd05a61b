"""State machine for a candidate's engagement with aggregated postings.

Candidates can save an aggregated posting, click through to the external
apply page, self-report that they applied, or dismiss it. Status only moves
forward along new -> saved -> clicked_apply -> applied; an operation that
would move a record backwards is a successful no-op.

Every write is a compare-and-set on the status that was read. When two
writes race, the loser re-reads and re-evaluates, so the most progressed
status wins.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, Dict, FrozenSet, Optional

from tradematch.domain.models import Interaction, InteractionStatus
from tradematch.logging import get_logger
from tradematch.logging.context import log_context
from tradematch.utils.timestamps import utc_now

from .exceptions import ConcurrentModificationError, InvalidTransitionError
from .protocols import InteractionStore

logger = get_logger(__name__, component="lifecycle")

DEFAULT_CAS_MAX_ATTEMPTS = 3

_S = InteractionStatus

INTERACTION_TRANSITIONS: Dict[InteractionStatus, FrozenSet[InteractionStatus]] = {
    _S.NEW: frozenset({_S.SAVED, _S.CLICKED_APPLY, _S.APPLIED, _S.NOT_INTERESTED}),
    _S.SAVED: frozenset({_S.CLICKED_APPLY, _S.APPLIED, _S.NOT_INTERESTED}),
    _S.CLICKED_APPLY: frozenset({_S.APPLIED, _S.NOT_INTERESTED}),
    _S.APPLIED: frozenset(),
    # Saving or clicking again re-engages a dismissed posting
    _S.NOT_INTERESTED: frozenset({_S.SAVED, _S.CLICKED_APPLY}),
}

# Position on the forward path; not_interested sits off it
PROGRESS_RANK: Dict[InteractionStatus, int] = {
    _S.NEW: 0,
    _S.NOT_INTERESTED: 0,
    _S.SAVED: 1,
    _S.CLICKED_APPLY: 2,
    _S.APPLIED: 3,
}

# Plans return the record to write, or None to leave the stored one as is
Plan = Callable[[Interaction], Optional[Interaction]]


def can_transition(current: InteractionStatus, target: InteractionStatus) -> bool:
    """Whether the table allows moving from ``current`` to ``target``.

    Example:
        >>> can_transition(InteractionStatus.APPLIED, InteractionStatus.SAVED)
        False
    """
    return InteractionStatus(target) in INTERACTION_TRANSITIONS[InteractionStatus(current)]


class InteractionService:
    """Applies candidate actions to interaction records.

    No notifications are sent from here; only formal applications notify.
    """

    def __init__(
        self,
        store: InteractionStore,
        cas_max_attempts: int = DEFAULT_CAS_MAX_ATTEMPTS,
        clock: Callable[[], datetime] = utc_now,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize InteractionService.

        Args:
            store: Interaction store
            cas_max_attempts: Compare-and-set attempts before giving up
            clock: Source of the current UTC time
            logger_instance: Optional logger instance (defaults to module logger)
        """
        if cas_max_attempts < 1:
            raise ValueError(f"cas_max_attempts must be at least 1, got {cas_max_attempts}")

        self.store = store
        self.cas_max_attempts = cas_max_attempts
        self.clock = clock
        self.logger = logger_instance or logger

    def get(self, candidate_id: str, job_id: str) -> Optional[Interaction]:
        return self.store.get(candidate_id, job_id)

    def save(self, candidate_id: str, job_id: str) -> Interaction:
        """Bookmark a posting.

        Creates the record when absent. A posting the candidate already
        clicked through or applied to stays where it is.
        """

        def plan(current: Interaction) -> Optional[Interaction]:
            if PROGRESS_RANK[current.status] >= PROGRESS_RANK[_S.SAVED]:
                return None
            now = self.clock()
            return self._moved(current, _S.SAVED, now, saved_at=now)

        return self._apply(candidate_id, job_id, "save", plan)

    def record_apply_click(self, candidate_id: str, job_id: str) -> Interaction:
        """Record a click-through to the external apply page.

        The click time is refreshed on every click, including on records that
        are already applied; those keep their status.
        """

        def plan(current: Interaction) -> Optional[Interaction]:
            now = self.clock()
            if current.status in (_S.CLICKED_APPLY, _S.APPLIED):
                return current.model_copy(update={"clicked_apply_at": now, "updated_at": now})
            return self._moved(current, _S.CLICKED_APPLY, now, clicked_apply_at=now)

        return self._apply(candidate_id, job_id, "record_apply_click", plan)

    def mark_applied(
        self, candidate_id: str, job_id: str, notes: Optional[str] = None
    ) -> Interaction:
        """Record the candidate's own report that they applied.

        Marking an applied record again keeps its status and applied_at and
        only replaces notes when new ones are given.

        Raises:
            InvalidTransitionError: If the candidate dismissed the posting
        """

        def plan(current: Interaction) -> Optional[Interaction]:
            now = self.clock()
            if current.status == _S.APPLIED:
                if notes is None:
                    return None
                return current.model_copy(update={"notes": notes, "updated_at": now})
            changes = {"applied_at": now}
            if notes is not None:
                changes["notes"] = notes
            return self._moved(current, _S.APPLIED, now, **changes)

        return self._apply(candidate_id, job_id, "mark_applied", plan)

    def mark_not_interested(self, candidate_id: str, job_id: str) -> Interaction:
        """Dismiss a posting.

        Raises:
            InvalidTransitionError: If the candidate already applied
        """

        def plan(current: Interaction) -> Optional[Interaction]:
            if current.status == _S.NOT_INTERESTED:
                return None
            return self._moved(current, _S.NOT_INTERESTED, self.clock())

        return self._apply(candidate_id, job_id, "mark_not_interested", plan)

    def _moved(
        self, current: Interaction, target: InteractionStatus, now: datetime, **changes
    ) -> Interaction:
        """Copy of ``current`` moved to ``target``, checked against the table."""
        if not can_transition(current.status, target):
            raise InvalidTransitionError(
                f"Cannot move interaction from {current.status.value} to {target.value}",
                current_status=current.status.value,
                requested_status=target.value,
            )

        return current.model_copy(
            update={"status": target, "status_updated_at": now, "updated_at": now, **changes}
        )

    def _apply(self, candidate_id: str, job_id: str, operation: str, plan: Plan) -> Interaction:
        """Read, plan and compare-and-set until the write lands or attempts run out."""
        with log_context(candidate_id=candidate_id, job_id=job_id):
            for attempt in range(1, self.cas_max_attempts + 1):
                stored = self.store.get(candidate_id, job_id)
                current = stored or self._blank(candidate_id, job_id)
                desired = plan(current)

                if desired is None:
                    if stored is not None:
                        self._log_noop(operation, stored)
                        return stored
                    # Nothing to record for a pair never touched before
                    return current

                if stored is None:
                    written = self.store.insert(desired)
                else:
                    written = self.store.compare_and_set(desired, stored.status)

                if written:
                    self._log_written(operation, current, desired)
                    return desired

                self.logger.debug(
                    f"Interaction changed during {operation}, retrying "
                    f"(attempt {attempt}/{self.cas_max_attempts})",
                    extra={
                        "event": "interaction.cas.conflict",
                        "operation": operation,
                        "attempt": attempt,
                    },
                )

            self.logger.warning(
                f"Gave up on {operation} after {self.cas_max_attempts} conflicting writes",
                extra={
                    "event": "interaction.cas.exhausted",
                    "operation": operation,
                    "attempts": self.cas_max_attempts,
                },
            )
            raise ConcurrentModificationError(
                f"Interaction for candidate {candidate_id} / job {job_id} kept changing "
                f"during {operation}"
            )

    def _blank(self, candidate_id: str, job_id: str) -> Interaction:
        now = self.clock()
        return Interaction(
            id=uuid.uuid4().hex,
            candidate_id=candidate_id,
            job_id=job_id,
            status=_S.NEW,
            created_at=now,
            updated_at=now,
        )

    def _log_written(self, operation: str, before: Interaction, after: Interaction) -> None:
        if before.status == after.status:
            self.logger.info(
                f"Interaction {operation}: {after.status.value} (fields updated)",
                extra={
                    "event": "interaction.updated",
                    "operation": operation,
                    "status": after.status.value,
                },
            )
            return

        self.logger.info(
            f"Interaction {operation}: {before.status.value} -> {after.status.value}",
            extra={
                "event": "interaction.status.changed",
                "operation": operation,
                "from_status": before.status.value,
                "to_status": after.status.value,
            },
        )

    def _log_noop(self, operation: str, current: Interaction) -> None:
        self.logger.debug(
            f"Interaction {operation} left status {current.status.value} unchanged",
            extra={
                "event": "interaction.noop",
                "operation": operation,
                "status": current.status.value,
            },
        )
