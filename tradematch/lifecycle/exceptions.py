"""Exceptions raised by the interaction and application state machines."""


class LifecycleError(Exception):
    """Base exception for all lifecycle errors.

    Catching this catches every error a state-machine operation can raise
    on purpose. Store failures (PersistenceError) are not wrapped.
    """

    pass


class InvalidTransitionError(LifecycleError):
    """A status change the state machine does not allow."""

    def __init__(self, message: str, current_status: str, requested_status: str) -> None:
        """Initialize with the statuses involved.

        Args:
            message: Human-readable error message
            current_status: Status the record is in
            requested_status: Status that was asked for
        """
        super().__init__(message)
        self.current_status = current_status
        self.requested_status = requested_status


class DuplicateApplicationError(LifecycleError):
    """An application already exists for this candidate and job."""

    def __init__(self, candidate_id: str, job_id: str) -> None:
        super().__init__(
            f"Candidate {candidate_id} has already applied to job {job_id}"
        )
        self.candidate_id = candidate_id
        self.job_id = job_id


class NotFoundError(LifecycleError):
    """The record an operation targets does not exist."""

    pass


class ConcurrentModificationError(LifecycleError):
    """The record kept changing underneath a write.

    Raised after the configured number of compare-and-set attempts all lost
    the race. Retrying the operation later is safe.
    """

    pass
