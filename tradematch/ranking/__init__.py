"""Filtering and sorting of candidate job lists."""

from .models import FeedRow, FilterSpec, SortOrder
from .pay import HOURS_PER_YEAR, pay_midpoint
from .service import rank

__all__ = [
    "FeedRow",
    "FilterSpec",
    "SortOrder",
    "rank",
    "pay_midpoint",
    "HOURS_PER_YEAR",
]
