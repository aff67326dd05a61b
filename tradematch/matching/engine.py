"""Deterministic match scoring between a candidate and a job.

The score is built from four factors worth 25 points each:
1. Experience: candidate years against the job's minimum
2. Processes: share of required process tags the candidate holds
3. Positions: share of required position tags the candidate holds
4. Certifications: share of required certs held *and verified*

A factor whose requirement is unset (minimum of 0, empty tag set) is left
out of both numerator and denominator, and the total is rescaled to 100.
A job with no requirements at all gets the neutral score.
"""

import logging
import math
from fractions import Fraction
from typing import FrozenSet, List, Optional

from tradematch.domain.attributes import missing, overlap
from tradematch.domain.models import CandidateProfile, JobRequirement
from tradematch.logging import get_logger

from .models import FACTOR_MAX_POINTS, NEUTRAL_SCORE, FactorScore, MatchResult

logger = get_logger(__name__, component="matching")


class MatchScorer:
    """Scores candidates against job requirements.

    Stateless: one instance can be shared across threads.
    """

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        """Initialize MatchScorer.

        Args:
            logger_instance: Optional logger instance (defaults to module logger)
        """
        self.logger = logger_instance or logger

    def score(self, candidate: CandidateProfile, job: JobRequirement) -> MatchResult:
        """Score one candidate against one job.

        Never raises for well-formed models. Malformed numbers (negative or
        non-finite experience values) are clamped to 0 with a warning.

        Args:
            candidate: Candidate profile
            job: Job requirements

        Returns:
            MatchResult with an integer score in [0, 100] and a factor breakdown
        """
        years = self._sanitize_years(
            candidate.years_experience, "years_experience", candidate.id, job.id
        )
        min_years = self._sanitize_years(job.min_experience, "min_experience", candidate.id, job.id)

        factors: List[FactorScore] = []

        if min_years > 0:
            factors.append(self._experience_factor(years, min_years))

        for name, required, held in (
            ("processes", job.required_processes, candidate.processes),
            ("positions", job.required_positions, candidate.positions),
            ("certifications", job.required_certifications, candidate.verified_certifications),
        ):
            if required:
                factors.append(self._tag_factor(name, required, held))

        if not factors:
            score = NEUTRAL_SCORE
            reason = "Job lists no requirements; scored as a possible match"
        else:
            earned = sum(factor.points for factor in factors)
            possible = sum(factor.max_points for factor in factors)
            score = _rescale(earned, possible)
            reason = "; ".join(
                f"{factor.name.capitalize()} {factor.points}/{factor.max_points} ({factor.detail})"
                for factor in factors
            )

        missing_skills = sorted({tag for factor in factors for tag in factor.missing})

        self.logger.debug(
            f"Scored candidate {candidate.id} against job {job.id}: {score}",
            extra={
                "event": "matching.scored",
                "candidate_id": candidate.id,
                "job_id": job.id,
                "score": score,
                "factors_included": len(factors),
                "missing_count": len(missing_skills),
            },
        )

        return MatchResult(
            candidate_id=candidate.id,
            job_id=job.id,
            score=score,
            reason=reason,
            missing_skills=missing_skills,
            factors=factors,
        )

    @staticmethod
    def _experience_factor(years: float, min_years: float) -> FactorScore:
        if years >= min_years:
            points = FACTOR_MAX_POINTS
        else:
            # Fractions keep integral inputs exact (2/3*25 floors to 16, not 16.666..)
            points = math.floor(Fraction(years) / Fraction(min_years) * FACTOR_MAX_POINTS)
            points = max(points, 0)

        return FactorScore(
            name="experience",
            points=points,
            detail=f"{_format_years(years)} yrs, {_format_years(min_years)} required",
        )

    @staticmethod
    def _tag_factor(
        name: str, required: FrozenSet[str], held: FrozenSet[str]
    ) -> FactorScore:
        _, matched_count = overlap(required, held)
        points = matched_count * FACTOR_MAX_POINTS // len(required)

        return FactorScore(
            name=name,
            points=points,
            detail=f"{matched_count} of {len(required)}",
            missing=tuple(sorted(missing(required, held))),
        )

    def _sanitize_years(
        self, value: Optional[float], field_name: str, candidate_id: str, job_id: str
    ) -> float:
        """Treat None as 0 and clamp negative or non-finite values to 0."""
        if value is None:
            return 0

        if not math.isfinite(value) or value < 0:
            self.logger.warning(
                f"Clamped invalid {field_name}={value!r} to 0",
                extra={
                    "event": "matching.input.clamped",
                    "field": field_name,
                    "value": repr(value),
                    "candidate_id": candidate_id,
                    "job_id": job_id,
                },
            )
            return 0

        return value


def _rescale(earned: int, possible: int) -> int:
    """Round earned/possible*100 half-up using integer arithmetic."""
    return (earned * 200 + possible) // (possible * 2)


def _format_years(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


_default_scorer = MatchScorer()


def score(candidate: CandidateProfile, job: JobRequirement) -> MatchResult:
    """Score with a shared default MatchScorer."""
    return _default_scorer.score(candidate, job)
