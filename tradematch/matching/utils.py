"""Helpers for presenting and reconciling match results.

A job can carry two scores: the internal one computed by MatchScorer and an
external one supplied by the AI scorer (possibly cached on the candidate's
interaction record). These helpers decide which one is shown and turn a
result into a JSON-ready rationale.
"""

from typing import Any, Dict, Optional

from tradematch.domain.models import Interaction

from .models import SOURCE_EXTERNAL, MatchResult


def resolve_display_match(
    internal: Optional[MatchResult], external: Optional[MatchResult]
) -> Optional[MatchResult]:
    """Pick the result shown to the user.

    An external score always wins for display; the internal score is the
    fallback for jobs the external scorer never saw.
    """
    if external is not None:
        return external
    return internal


def external_match_from_interaction(interaction: Optional[Interaction]) -> Optional[MatchResult]:
    """Rebuild the external score cached on an interaction record, if any."""
    if interaction is None or interaction.match_score is None:
        return None

    return MatchResult(
        candidate_id=interaction.candidate_id,
        job_id=interaction.job_id,
        score=interaction.match_score,
        reason=interaction.match_reason,
        missing_skills=list(interaction.missing_skills),
        source=SOURCE_EXTERNAL,
    )


def build_rationale_dict(match_result: MatchResult) -> Dict[str, Any]:
    """Build a JSON-ready rationale for a match result.

    Useful for storing alongside results in logs or printing from the CLI.

    Args:
        match_result: MatchResult to serialize

    Returns:
        Dict with keys:
        - candidate_id, job_id: What was scored
        - score: Integer score
        - band, label, recommendation: Presentation band
        - source: internal or external
        - reason: Explanation text (may be None)
        - missing_skills: Required tags the candidate lacks
        - factors: List of {name, points, max_points, detail}
    """
    band = match_result.band
    return {
        "candidate_id": match_result.candidate_id,
        "job_id": match_result.job_id,
        "score": match_result.score,
        "band": band.value,
        "label": band.label,
        "recommendation": band.recommendation,
        "source": match_result.source,
        "reason": match_result.reason,
        "missing_skills": list(match_result.missing_skills),
        "factors": [
            {
                "name": factor.name,
                "points": factor.points,
                "max_points": factor.max_points,
                "detail": factor.detail,
            }
            for factor in match_result.factors
        ],
    }
