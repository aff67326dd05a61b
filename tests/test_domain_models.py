"""Unit tests for domain models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from tradematch.domain.models import (
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


class TestCandidateProfile:
    """Tests for CandidateProfile model."""

    def test_tags_normalized(self):
        """Test process and position tags are stripped and de-duplicated."""
        candidate = CandidateProfile(
            id="cand-001", processes=[" SMAW", "GMAW", "", "SMAW "], positions="3G"
        )

        assert candidate.processes == frozenset({"SMAW", "GMAW"})
        assert candidate.positions == frozenset({"3G"})

    def test_verified_certifications(self):
        """Test only verified certifications are exposed for matching."""
        candidate = CandidateProfile(
            id="cand-001",
            certifications=[
                {"cert_type": "CWI", "verification_status": "verified"},
                {"cert_type": "AWS D1.1", "verification_status": "pending"},
                {"cert_type": "API 1104", "verification_status": "VERIFIED"},
            ],
        )

        assert candidate.verified_certifications == frozenset({"CWI", "API 1104"})

    def test_loose_experience_accepted(self):
        """Test malformed years are accepted here and left to the scorer."""
        assert CandidateProfile(id="c", years_experience=-2).years_experience == -2
        assert CandidateProfile(id="c").years_experience is None

    def test_location(self):
        """Test location joins city and state when present."""
        assert CandidateProfile(id="c", city="Houston", state="TX").location == "Houston, TX"
        assert CandidateProfile(id="c", state="TX").location == "TX"
        assert CandidateProfile(id="c").location is None

    def test_id_required(self):
        """Test a candidate needs an id."""
        with pytest.raises(ValidationError):
            CandidateProfile()


class TestCertification:
    def test_blank_cert_type_rejected(self):
        """Test an empty cert type is invalid."""
        with pytest.raises(ValidationError):
            Certification(cert_type="   ")

    def test_default_is_pending(self):
        """Test certifications start unverified."""
        cert = Certification(cert_type=" CWI ")

        assert cert.cert_type == "CWI"
        assert cert.is_verified is False


class TestJobRequirement:
    """Tests for JobRequirement model."""

    def test_defaults(self):
        """Test a bare job has no requirements and is first-party."""
        job = JobRequirement(id="job-001")

        assert job.min_experience == 0
        assert job.required_processes == frozenset()
        assert job.is_active is True
        assert job.is_external is False

    def test_source_marks_external(self):
        """Test a job with a source is an aggregated posting."""
        assert JobRequirement(id="j", source="Indeed").is_external is True
        assert JobRequirement(id="j", source="  ").is_external is False

    def test_posted_at_converted_to_utc(self):
        """Test offset timestamps are converted and naive ones read as UTC."""
        offset = timezone(timedelta(hours=-6))
        job = JobRequirement(id="j", posted_at=datetime(2025, 11, 1, 6, 0, tzinfo=offset))
        naive = JobRequirement(id="j", posted_at=datetime(2025, 11, 1, 12, 0))

        assert job.posted_at == datetime(2025, 11, 1, 12, 0, tzinfo=timezone.utc)
        assert naive.posted_at.tzinfo == timezone.utc

    def test_from_json_payload(self):
        """Test a JSON-shaped payload validates including nested pay."""
        job = JobRequirement.model_validate(
            JobRequirement.model_config["json_schema_extra"]["example"]
        )

        assert job.required_certifications == frozenset({"CWI"})
        assert job.pay.period == PayPeriod.HOURLY
        assert job.posted_at.tzinfo == timezone.utc


class TestPayRange:
    def test_blank_display_is_none(self):
        """Test whitespace-only display text is dropped."""
        assert PayRange(display="  ").display is None

    def test_invalid_period_rejected(self):
        """Test only hourly, salary and doe are accepted."""
        with pytest.raises(ValidationError):
            PayRange(period="weekly")


class TestLifecycleRecords:
    def test_interaction_defaults(self):
        """Test a new interaction starts in status new."""
        interaction = Interaction(id="i1", candidate_id="c", job_id="j")

        assert interaction.status == InteractionStatus.NEW
        assert interaction.missing_skills == []

    @pytest.mark.parametrize("bad_score", [-1, 101])
    def test_cached_score_range(self, bad_score):
        """Test cached external scores must be within 0..100."""
        with pytest.raises(ValidationError):
            Interaction(id="i1", candidate_id="c", job_id="j", match_score=bad_score)

    def test_application_defaults(self):
        """Test a new application starts in status new with no reason."""
        application = Application(id="a1", candidate_id="c", job_id="j")

        assert application.status == ApplicationStatus.NEW
        assert application.rejection_reason is None

    def test_status_from_string(self):
        """Test statuses validate from their string values."""
        application = Application(id="a1", candidate_id="c", job_id="j", status="interview")

        assert application.status == ApplicationStatus.INTERVIEW
