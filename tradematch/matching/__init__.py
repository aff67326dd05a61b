"""Match scoring between candidate profiles and job requirements.

This module provides:
- MatchScorer / score: the deterministic four-factor scorer
- MatchResult / FactorScore: scoring results with a per-factor breakdown
- ScoreBand / score_band: presentation bands (85 / 70 / 50 cut points)
- Helpers for display precedence and rationale output
"""

from .engine import MatchScorer, score
from .exceptions import InvariantViolationError
from .models import (
    FACTOR_MAX_POINTS,
    GOOD_MATCH_THRESHOLD,
    NEUTRAL_SCORE,
    FactorScore,
    MatchResult,
    ScoreBand,
    score_band,
)
from .utils import build_rationale_dict, external_match_from_interaction, resolve_display_match

__all__ = [
    "MatchScorer",
    "score",
    "MatchResult",
    "FactorScore",
    "ScoreBand",
    "score_band",
    "FACTOR_MAX_POINTS",
    "NEUTRAL_SCORE",
    "GOOD_MATCH_THRESHOLD",
    "InvariantViolationError",
    "resolve_display_match",
    "external_match_from_interaction",
    "build_rationale_dict",
]
