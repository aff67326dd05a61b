"""Data models for match scoring results.

This module defines the score breakdown produced by the scorer, the
presentation bands shared with every consumer of a score, and the
thresholds the ranker filters on.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .exceptions import InvariantViolationError

FACTOR_MAX_POINTS = 25
NEUTRAL_SCORE = 50
GOOD_MATCH_THRESHOLD = 70

MIN_SCORE = 0
MAX_SCORE = 100

SOURCE_INTERNAL = "internal"
SOURCE_EXTERNAL = "external"


class ScoreBand(str, Enum):
    """Presentation band for a 0-100 score. Cut points are 85, 70 and 50."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    LOW = "low"

    @property
    def label(self) -> str:
        return _BAND_LABELS[self]

    @property
    def recommendation(self) -> str:
        """Recommendation code used by the external scorer's vocabulary."""
        return _BAND_RECOMMENDATIONS[self]


_BAND_LABELS = {
    ScoreBand.EXCELLENT: "Excellent Match",
    ScoreBand.GOOD: "Good Match",
    ScoreBand.FAIR: "Fair Match",
    ScoreBand.LOW: "Low Match",
}

_BAND_RECOMMENDATIONS = {
    ScoreBand.EXCELLENT: "STRONG_MATCH",
    ScoreBand.GOOD: "GOOD_MATCH",
    ScoreBand.FAIR: "POSSIBLE_MATCH",
    ScoreBand.LOW: "WEAK_MATCH",
}


def score_band(score: int) -> ScoreBand:
    """Map a score to its presentation band.

    Example:
        >>> score_band(62).label
        'Fair Match'
    """
    if score >= 85:
        return ScoreBand.EXCELLENT
    if score >= 70:
        return ScoreBand.GOOD
    if score >= 50:
        return ScoreBand.FAIR
    return ScoreBand.LOW


def _is_int_score(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class FactorScore:
    """Points earned by one scoring factor.

    Attributes:
        name: experience, processes, positions or certifications
        points: Points earned, 0..max_points
        max_points: Weight of the factor
        detail: Short human-readable account, e.g. "1 of 2"
        missing: Required tags the candidate lacks (empty for experience)
    """

    name: str
    points: int
    max_points: int = FACTOR_MAX_POINTS
    detail: str = ""
    missing: Tuple[str, ...] = ()

    def __post_init__(self):
        if not _is_int_score(self.points) or not 0 <= self.points <= self.max_points:
            raise InvariantViolationError(
                f"Factor {self.name} scored {self.points!r}, outside [0, {self.max_points}]"
            )


@dataclass
class MatchResult:
    """Fit between one candidate and one job.

    Attributes:
        candidate_id: Candidate the score is for
        job_id: Job the score is for
        score: Integer in [0, 100]
        reason: Optional human-readable explanation
        missing_skills: Required tags the candidate lacks
        factors: Per-factor breakdown (empty for external or neutral scores)
        source: "internal" for the built-in scorer, "external" for the AI scorer

    Raises:
        InvariantViolationError: If score is not an integer in [0, 100]
    """

    candidate_id: str
    job_id: str
    score: int
    reason: Optional[str] = None
    missing_skills: List[str] = field(default_factory=list)
    factors: List[FactorScore] = field(default_factory=list)
    source: str = SOURCE_INTERNAL

    def __post_init__(self):
        if not _is_int_score(self.score) or not MIN_SCORE <= self.score <= MAX_SCORE:
            raise InvariantViolationError(
                f"Match score {self.score!r} for candidate {self.candidate_id} / "
                f"job {self.job_id} is outside [{MIN_SCORE}, {MAX_SCORE}]"
            )

    @property
    def band(self) -> ScoreBand:
        return score_band(self.score)

    @property
    def is_good_match(self) -> bool:
        return self.score >= GOOD_MATCH_THRESHOLD

    @property
    def is_neutral(self) -> bool:
        """True when the job stated no requirements and the neutral score was used."""
        return self.source == SOURCE_INTERNAL and not self.factors
