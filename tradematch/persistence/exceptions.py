"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError, so callers can
treat any storage failure with a single except clause.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when the database cannot be initialized or reached.

    Examples:
    - Empty or malformed database URL
    - Database file not writable
    - Session requested before init_database()
    """

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when an update targets a record that does not exist.

    Lookups return None instead of raising this.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised when a write violates a constraint.

    The usual cause is a second interaction or application for the same
    (candidate_id, job_id) pair.
    """

    pass
