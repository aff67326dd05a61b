"""Core domain models for candidates, jobs and their lifecycle records.

This module defines the data structures shared across the engine:
- CandidateProfile / Certification: the worker side, read-only to the engine
- JobRequirement / PayRange: a first-party or aggregated posting
- Interaction: informal engagement with an aggregated posting
- Application: formal application to a first-party posting
"""

from datetime import datetime
from enum import Enum
from typing import FrozenSet, List, Optional

from pydantic import BaseModel, Field, field_validator

from tradematch.utils.timestamps import ensure_utc

from .attributes import normalize_tags

VERIFIED_STATUS = "verified"


class InteractionStatus(str, Enum):
    """Where a candidate stands with an aggregated posting."""

    NEW = "new"
    SAVED = "saved"
    CLICKED_APPLY = "clicked_apply"
    APPLIED = "applied"
    NOT_INTERESTED = "not_interested"


class ApplicationStatus(str, Enum):
    """Employer pipeline stage of a first-party application."""

    NEW = "new"
    REVIEWING = "reviewing"
    INTERVIEW = "interview"
    OFFER = "offer"
    HIRED = "hired"
    REJECTED = "rejected"


class PayPeriod(str, Enum):
    """How a posting quotes pay."""

    HOURLY = "hourly"
    SALARY = "salary"
    DOE = "doe"


class PayRange(BaseModel):
    """Pay offered by a posting or desired by a candidate.

    Aggregated postings often only carry ``display`` text such as
    "$25 - $35/hr"; first-party postings fill the numeric fields.
    """

    minimum: Optional[float] = Field(None, description="Lower bound")
    maximum: Optional[float] = Field(None, description="Upper bound")
    period: Optional[PayPeriod] = Field(None, description="hourly, salary or doe")
    display: Optional[str] = Field(None, description="Free-text pay as shown to candidates")

    @field_validator("display")
    @classmethod
    def strip_display(cls, v: Optional[str]) -> Optional[str]:
        """Blank display text becomes None."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None


class Certification(BaseModel):
    """A certification record held by a candidate."""

    cert_type: str = Field(..., description="Certification tag, e.g. CWI or AWS D1.1")
    verification_status: str = Field("pending", description="verified, pending, rejected, ...")

    @field_validator("cert_type")
    @classmethod
    def strip_cert_type(cls, v: str) -> str:
        """Strip whitespace from cert type."""
        if not v or not v.strip():
            raise ValueError("cert_type cannot be empty")
        return v.strip()

    @property
    def is_verified(self) -> bool:
        return self.verification_status.strip().lower() == VERIFIED_STATUS


class CandidateProfile(BaseModel):
    """A candidate's matchable attributes.

    ``years_experience`` is deliberately loose (None, negative or non-finite
    values are accepted); the scorer clamps them so one bad profile field
    never breaks a ranking pass.
    """

    id: str = Field(..., description="Candidate identifier")
    name: Optional[str] = Field(None, description="Display name shown to employers")
    years_experience: Optional[float] = Field(None, description="Years in the trade")
    processes: FrozenSet[str] = Field(default_factory=frozenset, description="Process skills")
    positions: FrozenSet[str] = Field(default_factory=frozenset, description="Position tags")
    certifications: List[Certification] = Field(default_factory=list)
    city: Optional[str] = None
    state: Optional[str] = None
    desired_pay: Optional[PayRange] = None

    @field_validator("processes", "positions", mode="before")
    @classmethod
    def normalize_tag_sets(cls, v):
        """Accept any iterable of tags; normalize to a frozenset."""
        return normalize_tags(v)

    @property
    def verified_certifications(self) -> FrozenSet[str]:
        """Cert tags whose verification status is 'verified'."""
        return frozenset(cert.cert_type for cert in self.certifications if cert.is_verified)

    @property
    def location(self) -> Optional[str]:
        parts = [part for part in (self.city, self.state) if part]
        return ", ".join(parts) if parts else None

    model_config = {"json_schema_extra": {"example": {
        "id": "cand-001",
        "name": "Dana Ortiz",
        "years_experience": 5,
        "processes": ["SMAW", "GMAW"],
        "positions": ["3G"],
        "certifications": [{"cert_type": "AWS D1.1", "verification_status": "verified"}],
        "city": "Houston",
        "state": "TX",
    }}}


class JobRequirement(BaseModel):
    """A job posting as seen by the matcher and the ranker.

    ``source`` names the aggregator a posting came from (Indeed, LinkedIn, ...)
    and is None for first-party postings.
    """

    id: str = Field(..., description="Job identifier")
    title: str = Field("", description="Job title")
    employer_name: Optional[str] = Field(None, description="Employer or company name")
    source: Optional[str] = Field(None, description="Aggregator name; None for first-party")
    min_experience: Optional[float] = Field(0, description="Minimum years; 0 means no minimum")
    required_processes: FrozenSet[str] = Field(default_factory=frozenset)
    required_positions: FrozenSet[str] = Field(default_factory=frozenset)
    required_certifications: FrozenSet[str] = Field(default_factory=frozenset)
    pay: Optional[PayRange] = None
    location: Optional[str] = None
    posted_at: Optional[datetime] = None
    is_active: bool = True

    @field_validator(
        "required_processes", "required_positions", "required_certifications", mode="before"
    )
    @classmethod
    def normalize_tag_sets(cls, v):
        """Accept any iterable of tags; normalize to a frozenset."""
        return normalize_tags(v)

    @field_validator("location", "employer_name", "source")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Strip whitespace; blank strings become None."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None

    @field_validator("posted_at")
    @classmethod
    def posted_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def is_external(self) -> bool:
        return self.source is not None

    model_config = {"json_schema_extra": {"example": {
        "id": "job-042",
        "title": "Pipe Welder",
        "employer_name": "Gulf Fabrication",
        "min_experience": 3,
        "required_processes": ["SMAW", "GTAW"],
        "required_positions": ["6G"],
        "required_certifications": ["CWI"],
        "pay": {"minimum": 28, "maximum": 36, "period": "hourly"},
        "location": "Baton Rouge, LA",
        "posted_at": "2025-11-01T12:00:00Z",
    }}}


class Interaction(BaseModel):
    """A candidate's engagement with one aggregated posting.

    Exactly one record exists per (candidate_id, job_id). The match fields
    cache a score supplied by the external AI scorer; the engine reads them
    but never writes them.
    """

    id: str = Field(..., description="Record identifier")
    candidate_id: str
    job_id: str
    status: InteractionStatus = InteractionStatus.NEW
    saved_at: Optional[datetime] = None
    clicked_apply_at: Optional[datetime] = None
    applied_at: Optional[datetime] = None
    notes: Optional[str] = None
    match_score: Optional[int] = Field(None, ge=0, le=100)
    match_reason: Optional[str] = None
    missing_skills: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    status_updated_at: Optional[datetime] = None

    @field_validator(
        "saved_at", "clicked_apply_at", "applied_at", "created_at", "updated_at",
        "status_updated_at",
    )
    @classmethod
    def timestamps_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class Application(BaseModel):
    """A formal application to a first-party posting.

    ``match_score`` is a snapshot taken at submission. ``rejection_reason``
    is only populated while the status is rejected.
    """

    id: str = Field(..., description="Application identifier")
    candidate_id: str
    job_id: str
    status: ApplicationStatus = ApplicationStatus.NEW
    match_score: Optional[int] = Field(None, ge=0, le=100)
    cover_message: Optional[str] = None
    employer_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def timestamps_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)
