"""Database schema definition and ORM models.

Timestamps are stored as ISO 8601 strings with a ``Z`` suffix. Both tables
enforce one row per (candidate_id, job_id); the lifecycle services rely on
that constraint to detect racing creates.
"""

import logging

from sqlalchemy import JSON, Column, Index, Integer, String, Text, UniqueConstraint, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from tradematch.domain.models import Application, Interaction
from tradematch.utils.timestamps import format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

Base = declarative_base()


class InteractionModel(Base):
    """ORM model for the job_interactions table."""

    __tablename__ = "job_interactions"

    id = Column(String(64), primary_key=True, nullable=False)
    candidate_id = Column(String(64), nullable=False)
    job_id = Column(String(64), nullable=False)
    status = Column(String(20), nullable=False, default="new")

    saved_at = Column(String(50), nullable=True)
    clicked_apply_at = Column(String(50), nullable=True)
    applied_at = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)

    # Cached external score; written by the AI scorer, read by the feed
    match_score = Column(Integer, nullable=True)
    match_reason = Column(Text, nullable=True)
    missing_skills = Column(JSON, nullable=True)

    created_at = Column(String(50), nullable=True)
    updated_at = Column(String(50), nullable=True)
    status_updated_at = Column(String(50), nullable=True)

    __table_args__ = (
        UniqueConstraint("candidate_id", "job_id", name="uq_interactions_candidate_job"),
        Index("idx_interactions_candidate", "candidate_id"),
        Index("idx_interactions_status", "status"),
    )

    def to_domain(self) -> Interaction:
        return Interaction(
            id=self.id,
            candidate_id=self.candidate_id,
            job_id=self.job_id,
            status=self.status,
            saved_at=parse_timestamp(self.saved_at),
            clicked_apply_at=parse_timestamp(self.clicked_apply_at),
            applied_at=parse_timestamp(self.applied_at),
            notes=self.notes,
            match_score=self.match_score,
            match_reason=self.match_reason,
            missing_skills=list(self.missing_skills or []),
            created_at=parse_timestamp(self.created_at),
            updated_at=parse_timestamp(self.updated_at),
            status_updated_at=parse_timestamp(self.status_updated_at),
        )

    @classmethod
    def from_domain(cls, interaction: Interaction) -> "InteractionModel":
        return cls(id=interaction.id, **interaction_values(interaction))


def interaction_values(interaction: Interaction) -> dict:
    """Column values for an interaction, excluding the primary key."""
    return {
        "candidate_id": interaction.candidate_id,
        "job_id": interaction.job_id,
        "status": interaction.status.value,
        "saved_at": format_timestamp(interaction.saved_at),
        "clicked_apply_at": format_timestamp(interaction.clicked_apply_at),
        "applied_at": format_timestamp(interaction.applied_at),
        "notes": interaction.notes,
        "match_score": interaction.match_score,
        "match_reason": interaction.match_reason,
        "missing_skills": list(interaction.missing_skills),
        "created_at": format_timestamp(interaction.created_at),
        "updated_at": format_timestamp(interaction.updated_at),
        "status_updated_at": format_timestamp(interaction.status_updated_at),
    }


class ApplicationModel(Base):
    """ORM model for the applications table."""

    __tablename__ = "applications"

    id = Column(String(64), primary_key=True, nullable=False)
    candidate_id = Column(String(64), nullable=False)
    job_id = Column(String(64), nullable=False)
    status = Column(String(20), nullable=False, default="new")

    # Display score snapshot taken at submission
    match_score = Column(Integer, nullable=True)
    cover_message = Column(Text, nullable=True)
    employer_notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(String(50), nullable=True)
    updated_at = Column(String(50), nullable=True)

    __table_args__ = (
        UniqueConstraint("candidate_id", "job_id", name="uq_applications_candidate_job"),
        Index("idx_applications_job", "job_id"),
        Index("idx_applications_status", "status"),
    )

    def to_domain(self) -> Application:
        return Application(
            id=self.id,
            candidate_id=self.candidate_id,
            job_id=self.job_id,
            status=self.status,
            match_score=self.match_score,
            cover_message=self.cover_message,
            employer_notes=self.employer_notes,
            rejection_reason=self.rejection_reason,
            created_at=parse_timestamp(self.created_at),
            updated_at=parse_timestamp(self.updated_at),
        )

    @classmethod
    def from_domain(cls, application: Application) -> "ApplicationModel":
        return cls(id=application.id, **application_values(application))


def application_values(application: Application) -> dict:
    """Column values for an application, excluding the primary key."""
    return {
        "candidate_id": application.candidate_id,
        "job_id": application.job_id,
        "status": application.status.value,
        "match_score": application.match_score,
        "cover_message": application.cover_message,
        "employer_notes": application.employer_notes,
        "rejection_reason": application.rejection_reason,
        "created_at": format_timestamp(application.created_at),
        "updated_at": format_timestamp(application.updated_at),
    }


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent).

    Args:
        engine: SQLAlchemy engine instance
    """
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)

        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")

    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
