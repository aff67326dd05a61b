"""Exceptions raised by the matching engine."""


class InvariantViolationError(Exception):
    """Raised when a value that must never occur reaches an output boundary.

    A score outside [0, 100] or a factor above its weight means a caller or
    an upstream scorer is broken. It is reported loudly instead of being
    clamped.
    """

    pass
