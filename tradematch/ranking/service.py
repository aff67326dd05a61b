"""Filter and sort job lists for display.

``rank`` is a pure function: it never mutates its input, it never raises
on rows it can read, and every sort is stable so equal keys keep the
order they arrived in.
"""

from typing import Callable, Dict, Iterable, List, Optional

from tradematch.matching.models import GOOD_MATCH_THRESHOLD
from tradematch.utils.timestamps import epoch_seconds

from .models import FeedRow, FilterSpec, SortOrder
from .pay import pay_midpoint

# Sort value for rows with no score or no readable pay; below any real value
MISSING_KEY = -1


def rank(rows: Iterable[FeedRow], filters: Optional[FilterSpec] = None) -> List[FeedRow]:
    """Filter rows and sort them by the requested key.

    Args:
        rows: Feed rows in their incoming order
        filters: Filters and sort key (defaults to no filters, newest first)

    Returns:
        New list of the rows that passed every filter, sorted

    Example:
        >>> ranked = rank(rows, FilterSpec(good_matches_only=True, sort_by="match"))
    """
    filters = filters or FilterSpec()
    kept = [row for row in rows if _passes(row, filters)]

    # sorted() with reverse=True keeps equal elements in original order
    return sorted(kept, key=_SORT_KEYS[filters.sort_by], reverse=True)


def _passes(row: FeedRow, filters: FilterSpec) -> bool:
    job = row.job

    if filters.active_only and not job.is_active:
        return False

    if filters.source is not None and job.source != filters.source:
        return False

    query = _needle(filters.query)
    if query is not None:
        haystacks = (job.title, job.employer_name, job.location)
        if not any(query in (value or "").lower() for value in haystacks):
            return False

    location = _needle(filters.location)
    if location is not None and location not in (job.location or "").lower():
        return False

    if filters.good_matches_only:
        score = row.display_score
        if score is None or score < GOOD_MATCH_THRESHOLD:
            return False

    if filters.statuses is not None and row.status not in filters.statuses:
        return False

    return True


def _needle(value: Optional[str]) -> Optional[str]:
    """Lowercased search text, or None when blank."""
    if value is None:
        return None
    stripped = value.strip().lower()
    return stripped or None


def _match_key(row: FeedRow) -> float:
    score = row.display_score
    return MISSING_KEY if score is None else score


def _posted_key(row: FeedRow) -> float:
    return epoch_seconds(row.job.posted_at)


def _pay_key(row: FeedRow) -> float:
    midpoint = pay_midpoint(row.job.pay)
    return MISSING_KEY if midpoint is None else midpoint


_SORT_KEYS: Dict[SortOrder, Callable[[FeedRow], float]] = {
    SortOrder.MATCH: _match_key,
    SortOrder.POSTED: _posted_key,
    SortOrder.PAY: _pay_key,
}
