"""Scoped logging context.

Fields pushed here (candidate_id, job_id, application_id and so on) are
picked up by ``ContextualFilter`` and attached to every record emitted in
the same call chain. Context lives in a ContextVar, so concurrent threads
and tasks never see each other's fields.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, Optional

LogContextVar: ContextVar[Dict[str, Any]] = ContextVar("tradematch_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the active logging context."""
    return dict(LogContextVar.get())


def push_log_context(**fields) -> Token:
    """Merge fields into the active context.

    Args:
        **fields: Key-value pairs to attach to subsequent log records

    Returns:
        Token for pop_log_context()
    """
    return LogContextVar.set({**LogContextVar.get(), **fields})


def pop_log_context(token: Token) -> None:
    """Restore the context captured by a push_log_context() token."""
    LogContextVar.reset(token)


def clear_log_context() -> None:
    """Drop all context fields. Mostly useful in tests."""
    LogContextVar.set({})


class log_context:
    """Context manager that scopes logging fields to a block.

    Example:
        >>> with log_context(candidate_id="c-1", job_id="j-9"):
        ...     logger.info("Interaction saved")  # carries candidate_id and job_id
    """

    def __init__(self, **fields):
        self.fields = fields
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
            self.token = None
        return False
