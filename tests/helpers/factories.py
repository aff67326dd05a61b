"""Builders for candidates, jobs and rows used across tests."""

from datetime import datetime, timezone

from tradematch.domain.models import CandidateProfile, Certification, JobRequirement
from tradematch.matching.models import SOURCE_EXTERNAL, MatchResult
from tradematch.ranking.models import FeedRow


def make_candidate(**overrides) -> CandidateProfile:
    data = {
        "id": "cand-001",
        "years_experience": 5,
        "processes": ["SMAW", "GMAW"],
        "positions": ["3G"],
        "certifications": [{"cert_type": "AWS D1.1", "verification_status": "verified"}],
        "city": "Houston",
        "state": "TX",
    }
    data.update(overrides)
    return CandidateProfile.model_validate(data)


def make_job(job_id: str = "job-001", **overrides) -> JobRequirement:
    data = {
        "id": job_id,
        "title": "Structural Welder",
        "employer_name": "Gulf Fabrication",
        "location": "Houston, TX",
        "posted_at": datetime(2025, 11, 1, 12, 0, 0, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return JobRequirement.model_validate(data)


def make_match(job_id: str, score: int, source: str = SOURCE_EXTERNAL) -> MatchResult:
    return MatchResult(candidate_id="cand-001", job_id=job_id, score=score, source=source)


def make_row(job_id: str = "job-001", score=None, external=None, state=None, **job_fields) -> FeedRow:
    match = make_match(job_id, score, source="internal") if score is not None else None
    external_match = make_match(job_id, external) if external is not None else None
    return FeedRow(
        job=make_job(job_id, **job_fields), match=match, external_match=external_match, state=state
    )


def verified(cert_type: str) -> Certification:
    return Certification(cert_type=cert_type, verification_status="verified")
