"""In-memory lifecycle stores for tests.

They follow the same contracts as the SQLAlchemy stores: one record per
(candidate_id, job_id), compare-and-set keyed on status, and
DuplicateApplicationError on a conflicting application insert.
"""

import threading
from typing import Dict, List, Optional, Tuple

from tradematch.domain.models import Application, Interaction, InteractionStatus
from tradematch.lifecycle.exceptions import DuplicateApplicationError


class InMemoryInteractionStore:
    """Thread-safe dict-backed interaction store."""

    def __init__(self):
        self._records: Dict[Tuple[str, str], Interaction] = {}
        self._lock = threading.Lock()
        self.cas_calls = 0

    def get(self, candidate_id: str, job_id: str) -> Optional[Interaction]:
        with self._lock:
            return self._records.get((candidate_id, job_id))

    def list_for_candidate(self, candidate_id: str) -> List[Interaction]:
        with self._lock:
            return [r for (cid, _), r in self._records.items() if cid == candidate_id]

    def insert(self, interaction: Interaction) -> bool:
        key = (interaction.candidate_id, interaction.job_id)
        with self._lock:
            if key in self._records:
                return False
            self._records[key] = interaction
            return True

    def compare_and_set(
        self, interaction: Interaction, expected_status: InteractionStatus
    ) -> bool:
        key = (interaction.candidate_id, interaction.job_id)
        with self._lock:
            self.cas_calls += 1
            current = self._records.get(key)
            if current is None or current.status != expected_status:
                return False
            self._records[key] = interaction
            return True

    def put(self, interaction: Interaction) -> None:
        """Seed a record directly, bypassing the state machine."""
        with self._lock:
            self._records[(interaction.candidate_id, interaction.job_id)] = interaction


class InMemoryApplicationStore:
    """Thread-safe dict-backed application store."""

    def __init__(self):
        self._records: Dict[str, Application] = {}
        self._lock = threading.Lock()

    def get(self, application_id: str) -> Optional[Application]:
        with self._lock:
            return self._records.get(application_id)

    def get_by_pair(self, candidate_id: str, job_id: str) -> Optional[Application]:
        with self._lock:
            for record in self._records.values():
                if record.candidate_id == candidate_id and record.job_id == job_id:
                    return record
            return None

    def list_for_candidate(self, candidate_id: str) -> List[Application]:
        with self._lock:
            return [r for r in self._records.values() if r.candidate_id == candidate_id]

    def insert(self, application: Application) -> None:
        with self._lock:
            for record in self._records.values():
                if (record.candidate_id, record.job_id) == (
                    application.candidate_id,
                    application.job_id,
                ):
                    raise DuplicateApplicationError(application.candidate_id, application.job_id)
            self._records[application.id] = application

    def update(self, application: Application) -> None:
        with self._lock:
            if application.id not in self._records:
                raise KeyError(application.id)
            self._records[application.id] = application
