"""Data access layer (repositories) for interactions and applications.

Repositories work inside the caller's session and never commit. They return
domain models rather than ORM models and wrap SQLAlchemy errors in
PersistenceError subclasses.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tradematch.domain.models import Application, Interaction, InteractionStatus

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import (
    ApplicationModel,
    InteractionModel,
    application_values,
    interaction_values,
)

logger = logging.getLogger(__name__)


class InteractionRepository:
    """Repository for candidate/posting interaction records."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get(self, candidate_id: str, job_id: str) -> Optional[Interaction]:
        """Retrieve the interaction for a candidate and job.

        Returns:
            Interaction if found, None otherwise

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(InteractionModel).where(
                InteractionModel.candidate_id == candidate_id,
                InteractionModel.job_id == job_id,
            )
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model is not None else None

        except SQLAlchemyError as e:
            logger.error(
                f"Error retrieving interaction {candidate_id}/{job_id}: {e}", exc_info=True
            )
            raise PersistenceError(f"Failed to retrieve interaction: {e}") from e

    def list_for_candidate(self, candidate_id: str) -> List[Interaction]:
        """All interactions of one candidate, most recently updated first.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                select(InteractionModel)
                .where(InteractionModel.candidate_id == candidate_id)
                .order_by(InteractionModel.updated_at.desc())
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            logger.error(
                f"Error listing interactions for candidate {candidate_id}: {e}", exc_info=True
            )
            raise PersistenceError(f"Failed to list interactions: {e}") from e

    def insert(self, interaction: Interaction) -> Interaction:
        """Insert a new interaction.

        Raises:
            DataIntegrityError: If the pair already has a record
            PersistenceError: If database error occurs
        """
        try:
            self.session.add(InteractionModel.from_domain(interaction))
            self.session.flush()
            return interaction

        except IntegrityError as e:
            logger.warning(
                f"Interaction for {interaction.candidate_id}/{interaction.job_id} already exists"
            )
            raise DataIntegrityError(
                f"Failed to insert interaction due to constraint violation: {e}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting interaction {interaction.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert interaction: {e}") from e

    def compare_and_set(
        self, interaction: Interaction, expected_status: InteractionStatus
    ) -> bool:
        """Overwrite the stored record only if its status is still ``expected_status``.

        Returns:
            True if the row was updated, False if the status had moved on

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            values = interaction_values(interaction)
            # Identity and creation time never change
            for key in ("candidate_id", "job_id", "created_at"):
                values.pop(key)

            stmt = (
                update(InteractionModel)
                .where(
                    InteractionModel.candidate_id == interaction.candidate_id,
                    InteractionModel.job_id == interaction.job_id,
                    InteractionModel.status == InteractionStatus(expected_status).value,
                )
                .values(**values)
            )
            result = self.session.execute(stmt)
            self.session.flush()
            return result.rowcount == 1

        except SQLAlchemyError as e:
            logger.error(f"Error updating interaction {interaction.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update interaction: {e}") from e


class ApplicationRepository:
    """Repository for formal applications."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get(self, application_id: str) -> Optional[Application]:
        """Retrieve an application by id.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            model = self.session.get(ApplicationModel, application_id)
            return model.to_domain() if model is not None else None

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving application {application_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve application: {e}") from e

    def get_by_pair(self, candidate_id: str, job_id: str) -> Optional[Application]:
        """Retrieve the application a candidate made to a job.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(ApplicationModel).where(
                ApplicationModel.candidate_id == candidate_id,
                ApplicationModel.job_id == job_id,
            )
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model is not None else None

        except SQLAlchemyError as e:
            logger.error(
                f"Error retrieving application {candidate_id}/{job_id}: {e}", exc_info=True
            )
            raise PersistenceError(f"Failed to retrieve application: {e}") from e

    def list_for_candidate(self, candidate_id: str) -> List[Application]:
        """All applications of one candidate, newest first.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                select(ApplicationModel)
                .where(ApplicationModel.candidate_id == candidate_id)
                .order_by(ApplicationModel.created_at.desc())
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            logger.error(
                f"Error listing applications for candidate {candidate_id}: {e}", exc_info=True
            )
            raise PersistenceError(f"Failed to list applications: {e}") from e

    def insert(self, application: Application) -> Application:
        """Insert a new application.

        Raises:
            DataIntegrityError: If the pair already has an application
            PersistenceError: If database error occurs
        """
        try:
            self.session.add(ApplicationModel.from_domain(application))
            self.session.flush()
            return application

        except IntegrityError as e:
            logger.warning(
                f"Application for {application.candidate_id}/{application.job_id} already exists"
            )
            raise DataIntegrityError(
                f"Failed to insert application due to constraint violation: {e}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting application {application.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert application: {e}") from e

    def update(self, application: Application) -> Application:
        """Overwrite the mutable fields of a stored application.

        Raises:
            RecordNotFoundError: If no application has this id
            PersistenceError: If database error occurs
        """
        try:
            values = application_values(application)
            for key in ("candidate_id", "job_id", "created_at"):
                values.pop(key)

            stmt = (
                update(ApplicationModel)
                .where(ApplicationModel.id == application.id)
                .values(**values)
            )
            result = self.session.execute(stmt)
            self.session.flush()

            if result.rowcount == 0:
                raise RecordNotFoundError(f"Application {application.id} not found")

            return application

        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating application {application.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update application: {e}") from e
