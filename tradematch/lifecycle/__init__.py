"""Interaction and application state machines.

This module provides:
- InteractionService: save / click / self-report / dismiss on aggregated postings
- ApplicationService: formal applications and employer status changes
- Protocols for the injected store, scorer and dispatcher
- Lifecycle exceptions
"""

from .applications import TRANSITION_TARGETS, ApplicationService
from .exceptions import (
    ConcurrentModificationError,
    DuplicateApplicationError,
    InvalidTransitionError,
    LifecycleError,
    NotFoundError,
)
from .interactions import (
    INTERACTION_TRANSITIONS,
    PROGRESS_RANK,
    InteractionService,
    can_transition,
)
from .protocols import (
    ApplicationStore,
    ExternalScorer,
    InteractionStore,
    NotificationDispatcher,
)

__all__ = [
    "InteractionService",
    "ApplicationService",
    "can_transition",
    "INTERACTION_TRANSITIONS",
    "PROGRESS_RANK",
    "TRANSITION_TARGETS",
    "InteractionStore",
    "ApplicationStore",
    "ExternalScorer",
    "NotificationDispatcher",
    "LifecycleError",
    "InvalidTransitionError",
    "DuplicateApplicationError",
    "NotFoundError",
    "ConcurrentModificationError",
]
