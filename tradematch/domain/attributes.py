"""Set helpers over attribute tags (weld processes, positions, cert types).

Tags are compared exactly; callers hand in already-normalized values.
"""

from typing import FrozenSet, Iterable, Optional, Tuple

Tag = str


def normalize_tags(values: Optional[Iterable[Tag]]) -> FrozenSet[Tag]:
    """Strip whitespace, drop empty entries and de-duplicate.

    Example:
        >>> sorted(normalize_tags([" SMAW", "GMAW", "", "SMAW"]))
        ['GMAW', 'SMAW']
    """
    if not values:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    return frozenset(value.strip() for value in values if value and value.strip())


def overlap(required: Iterable[Tag], held: Iterable[Tag]) -> Tuple[FrozenSet[Tag], int]:
    """Required tags the holder has, and how many there are.

    Example:
        >>> matched, count = overlap({"SMAW", "GTAW"}, {"SMAW", "GMAW"})
        >>> sorted(matched), count
        (['SMAW'], 1)
    """
    matched = frozenset(required) & frozenset(held)
    return matched, len(matched)


def missing(required: Iterable[Tag], held: Iterable[Tag]) -> FrozenSet[Tag]:
    """Required tags the holder lacks."""
    return frozenset(required) - frozenset(held)


def has_all(required: Iterable[Tag], held: Iterable[Tag]) -> bool:
    """True when every required tag is held (vacuously true for no requirements)."""
    return frozenset(required) <= frozenset(held)


def has_any(required: Iterable[Tag], held: Iterable[Tag]) -> bool:
    """True when at least one required tag is held (false for no requirements)."""
    return not frozenset(required).isdisjoint(frozenset(held))
