"""Domain models and attribute helpers for the TradeMatch engine."""

from .attributes import has_all, has_any, missing, normalize_tags, overlap
from .models import (
    Application,
    ApplicationStatus,
    CandidateProfile,
    Certification,
    Interaction,
    InteractionStatus,
    JobRequirement,
    PayPeriod,
    PayRange,
)

__all__ = [
    "CandidateProfile",
    "Certification",
    "JobRequirement",
    "PayRange",
    "PayPeriod",
    "Interaction",
    "InteractionStatus",
    "Application",
    "ApplicationStatus",
    "overlap",
    "missing",
    "has_all",
    "has_any",
    "normalize_tags",
]
