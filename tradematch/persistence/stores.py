"""SQLAlchemy-backed stores for the lifecycle services.

Each call runs in its own short session and commits before returning, so a
compare-and-set is visible to the next reader at once. Constraint conflicts
are translated into what the lifecycle protocols expect.
"""

from typing import Callable, ContextManager, List, Optional

from sqlalchemy.orm import Session

from tradematch.domain.models import Application, Interaction, InteractionStatus
from tradematch.lifecycle.exceptions import DuplicateApplicationError

from .database import get_session
from .exceptions import DataIntegrityError
from .repositories import ApplicationRepository, InteractionRepository

SessionScope = Callable[[], ContextManager[Session]]


class SqlInteractionStore:
    """Interaction store on top of InteractionRepository."""

    def __init__(self, session_scope: SessionScope = get_session):
        self.session_scope = session_scope

    def get(self, candidate_id: str, job_id: str) -> Optional[Interaction]:
        with self.session_scope() as session:
            return InteractionRepository(session).get(candidate_id, job_id)

    def list_for_candidate(self, candidate_id: str) -> List[Interaction]:
        with self.session_scope() as session:
            return InteractionRepository(session).list_for_candidate(candidate_id)

    def insert(self, interaction: Interaction) -> bool:
        """Insert a record; False if the pair already has one."""
        try:
            with self.session_scope() as session:
                InteractionRepository(session).insert(interaction)
        except DataIntegrityError:
            return False
        return True

    def compare_and_set(
        self, interaction: Interaction, expected_status: InteractionStatus
    ) -> bool:
        with self.session_scope() as session:
            return InteractionRepository(session).compare_and_set(interaction, expected_status)


class SqlApplicationStore:
    """Application store on top of ApplicationRepository."""

    def __init__(self, session_scope: SessionScope = get_session):
        self.session_scope = session_scope

    def get(self, application_id: str) -> Optional[Application]:
        with self.session_scope() as session:
            return ApplicationRepository(session).get(application_id)

    def get_by_pair(self, candidate_id: str, job_id: str) -> Optional[Application]:
        with self.session_scope() as session:
            return ApplicationRepository(session).get_by_pair(candidate_id, job_id)

    def list_for_candidate(self, candidate_id: str) -> List[Application]:
        with self.session_scope() as session:
            return ApplicationRepository(session).list_for_candidate(candidate_id)

    def insert(self, application: Application) -> None:
        """Insert a new application.

        Raises:
            DuplicateApplicationError: If the pair already has an application
        """
        try:
            with self.session_scope() as session:
                ApplicationRepository(session).insert(application)
        except DataIntegrityError as e:
            raise DuplicateApplicationError(application.candidate_id, application.job_id) from e

    def update(self, application: Application) -> None:
        with self.session_scope() as session:
            ApplicationRepository(session).update(application)
