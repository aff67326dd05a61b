"""Tests for the SQLAlchemy persistence layer.

Tests:
- Database initialization and session handling
- InteractionRepository and ApplicationRepository
- Compare-and-set semantics on interactions
- SqlInteractionStore / SqlApplicationStore protocol mapping
- Lifecycle services running against the SQL stores
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from sqlalchemy import inspect

from tradematch.domain.models import (
    Application,
    ApplicationStatus,
    Interaction,
    InteractionStatus,
)
from tradematch.lifecycle import (
    ApplicationService,
    DuplicateApplicationError,
    InteractionService,
)
from tradematch.persistence import (
    ApplicationRepository,
    DatabaseConnectionError,
    DataIntegrityError,
    InteractionRepository,
    RecordNotFoundError,
    SqlApplicationStore,
    SqlInteractionStore,
    close_database,
    get_engine,
    get_session,
    init_database,
)
from tradematch.persistence.database import _redact_url

NOW = datetime(2025, 11, 4, 15, 30, 0, 123456, tzinfo=timezone.utc)


@pytest.fixture
def db():
    """In-memory database, torn down after each test."""
    init_database("sqlite:///:memory:")
    yield
    close_database()


def make_interaction(job_id="job-001", status=InteractionStatus.SAVED, **fields):
    data = {
        "id": f"int-{job_id}",
        "candidate_id": "cand-001",
        "job_id": job_id,
        "status": status,
        "saved_at": NOW,
        "created_at": NOW,
        "updated_at": NOW,
        "status_updated_at": NOW,
    }
    data.update(fields)
    return Interaction(**data)


def make_application(app_id="app-1", job_id="job-001", **fields):
    data = {
        "id": app_id,
        "candidate_id": "cand-001",
        "job_id": job_id,
        "match_score": 62,
        "cover_message": "Available immediately",
        "created_at": NOW,
        "updated_at": NOW,
    }
    data.update(fields)
    return Application(**data)


class TestDatabase:
    def test_schema_created(self, db):
        """Test both lifecycle tables exist after init."""
        tables = inspect(get_engine()).get_table_names()

        assert "job_interactions" in tables
        assert "applications" in tables

    def test_file_database_creates_directory(self, tmp_path):
        """Test a SQLite file path gets its parent directory created."""
        db_file = tmp_path / "nested" / "state.db"

        init_database(f"sqlite:///{db_file}")
        try:
            assert db_file.parent.exists()
        finally:
            close_database()

    def test_session_before_init_raises(self):
        """Test sessions are refused until the database is initialized."""
        close_database()

        with pytest.raises(DatabaseConnectionError):
            with get_session():
                pass

    def test_empty_url_raises(self):
        """Test an empty URL is rejected."""
        with pytest.raises(DatabaseConnectionError):
            init_database("")

    def test_session_rolls_back_on_error(self, db):
        """Test an exception inside the session discards its writes."""
        with pytest.raises(RuntimeError):
            with get_session() as session:
                InteractionRepository(session).insert(make_interaction())
                raise RuntimeError("boom")

        with get_session() as session:
            assert InteractionRepository(session).get("cand-001", "job-001") is None

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("postgresql://app:s3cret@db:5432/trade", "postgresql://app:***@db:5432/trade"),
            ("sqlite:///./data/tradematch.db", "sqlite:///./data/tradematch.db"),
            ("postgresql://db/trade", "postgresql://db/trade"),
        ],
    )
    def test_redact_url(self, url, expected):
        """Test passwords are hidden before URLs are logged."""
        assert _redact_url(url) == expected


class TestInteractionRepository:
    def test_insert_and_get(self, db):
        """Test an interaction survives a round trip with timestamps intact."""
        interaction = make_interaction(
            notes="Looks good", match_score=81, match_reason="Process overlap",
            missing_skills=["6G"],
        )

        with get_session() as session:
            InteractionRepository(session).insert(interaction)

        with get_session() as session:
            stored = InteractionRepository(session).get("cand-001", "job-001")

        assert stored == interaction
        assert stored.saved_at == NOW
        assert stored.missing_skills == ["6G"]

    def test_get_missing_returns_none(self, db):
        """Test an unknown pair returns None."""
        with get_session() as session:
            assert InteractionRepository(session).get("cand-001", "nope") is None

    def test_duplicate_pair_raises(self, db):
        """Test the unique constraint on (candidate_id, job_id)."""
        with get_session() as session:
            InteractionRepository(session).insert(make_interaction())

        with pytest.raises(DataIntegrityError):
            with get_session() as session:
                InteractionRepository(session).insert(make_interaction(id="other-id"))

    def test_compare_and_set_matching_status(self, db):
        """Test the write lands when the stored status is the expected one."""
        with get_session() as session:
            InteractionRepository(session).insert(make_interaction())

        applied = make_interaction(status=InteractionStatus.APPLIED, applied_at=NOW)
        with get_session() as session:
            written = InteractionRepository(session).compare_and_set(
                applied, InteractionStatus.SAVED
            )

        assert written is True
        with get_session() as session:
            stored = InteractionRepository(session).get("cand-001", "job-001")
        assert stored.status == InteractionStatus.APPLIED
        assert stored.applied_at == NOW

    def test_compare_and_set_stale_status(self, db):
        """Test the write is refused when the status has moved on."""
        with get_session() as session:
            InteractionRepository(session).insert(
                make_interaction(status=InteractionStatus.APPLIED)
            )

        stale = make_interaction(status=InteractionStatus.CLICKED_APPLY)
        with get_session() as session:
            written = InteractionRepository(session).compare_and_set(
                stale, InteractionStatus.SAVED
            )

        assert written is False
        with get_session() as session:
            stored = InteractionRepository(session).get("cand-001", "job-001")
        assert stored.status == InteractionStatus.APPLIED

    def test_compare_and_set_keeps_created_at(self, db):
        """Test identity and creation time are never overwritten."""
        with get_session() as session:
            InteractionRepository(session).insert(make_interaction())

        later = NOW + timedelta(days=1)
        moved = make_interaction(
            status=InteractionStatus.NOT_INTERESTED, created_at=later, updated_at=later
        )
        with get_session() as session:
            InteractionRepository(session).compare_and_set(moved, InteractionStatus.SAVED)

        with get_session() as session:
            stored = InteractionRepository(session).get("cand-001", "job-001")
        assert stored.created_at == NOW
        assert stored.updated_at == later

    def test_list_for_candidate(self, db):
        """Test listing returns the candidate's records, most recent first."""
        with get_session() as session:
            repo = InteractionRepository(session)
            repo.insert(make_interaction("job-a", updated_at=NOW))
            repo.insert(make_interaction("job-b", updated_at=NOW + timedelta(hours=1)))
            repo.insert(make_interaction("job-c", candidate_id="cand-002"))

        with get_session() as session:
            listed = InteractionRepository(session).list_for_candidate("cand-001")

        assert [i.job_id for i in listed] == ["job-b", "job-a"]


class TestApplicationRepository:
    def test_insert_get_and_get_by_pair(self, db):
        """Test an application can be read by id and by pair."""
        application = make_application()

        with get_session() as session:
            ApplicationRepository(session).insert(application)

        with get_session() as session:
            repo = ApplicationRepository(session)
            assert repo.get("app-1") == application
            assert repo.get_by_pair("cand-001", "job-001") == application
            assert repo.get_by_pair("cand-001", "job-999") is None

    def test_duplicate_pair_raises(self, db):
        """Test one application per candidate and job."""
        with get_session() as session:
            ApplicationRepository(session).insert(make_application())

        with pytest.raises(DataIntegrityError):
            with get_session() as session:
                ApplicationRepository(session).insert(make_application(app_id="app-2"))

    def test_update(self, db):
        """Test status, reason and notes are overwritten."""
        with get_session() as session:
            ApplicationRepository(session).insert(make_application())

        rejected = make_application(
            status=ApplicationStatus.REJECTED,
            rejection_reason="Position filled",
            employer_notes="Revisit in spring",
        )
        with get_session() as session:
            ApplicationRepository(session).update(rejected)

        with get_session() as session:
            stored = ApplicationRepository(session).get("app-1")
        assert stored.status == ApplicationStatus.REJECTED
        assert stored.rejection_reason == "Position filled"
        assert stored.employer_notes == "Revisit in spring"
        assert stored.match_score == 62

    def test_update_missing_raises(self, db):
        """Test updating an unknown application raises RecordNotFoundError."""
        with pytest.raises(RecordNotFoundError):
            with get_session() as session:
                ApplicationRepository(session).update(make_application(app_id="ghost"))


class TestSqlStores:
    def test_interaction_insert_conflict_returns_false(self, db):
        """Test a second insert for the pair reports False instead of raising."""
        store = SqlInteractionStore()

        assert store.insert(make_interaction()) is True
        assert store.insert(make_interaction(id="other-id")) is False

    def test_interaction_compare_and_set(self, db):
        """Test compare-and-set through the store commits immediately."""
        store = SqlInteractionStore()
        store.insert(make_interaction())

        moved = make_interaction(status=InteractionStatus.CLICKED_APPLY)
        assert store.compare_and_set(moved, InteractionStatus.SAVED) is True
        assert store.compare_and_set(moved, InteractionStatus.SAVED) is False
        assert store.get("cand-001", "job-001").status == InteractionStatus.CLICKED_APPLY

    def test_application_duplicate_maps_to_lifecycle_error(self, db):
        """Test a constraint violation surfaces as DuplicateApplicationError."""
        store = SqlApplicationStore()
        store.insert(make_application())

        with pytest.raises(DuplicateApplicationError) as exc_info:
            store.insert(make_application(app_id="app-2"))

        assert exc_info.value.job_id == "job-001"

    def test_list_for_candidate(self, db):
        """Test stores expose the candidate's records."""
        store = SqlApplicationStore()
        store.insert(make_application("app-1", "job-001"))
        store.insert(make_application("app-2", "job-002", created_at=NOW + timedelta(hours=1)))

        assert [a.id for a in store.list_for_candidate("cand-001")] == ["app-2", "app-1"]


class TestServicesOnSqlStores:
    def test_interaction_lifecycle(self, db):
        """Test save, click and self-report persist through the SQL store."""
        service = InteractionService(SqlInteractionStore())

        service.save("cand-001", "job-001")
        service.record_apply_click("cand-001", "job-001")
        applied = service.mark_applied("cand-001", "job-001", notes="Applied online")
        again = service.save("cand-001", "job-001")

        assert applied.status == InteractionStatus.APPLIED
        assert again == applied
        stored = SqlInteractionStore().get("cand-001", "job-001")
        assert stored.status == InteractionStatus.APPLIED
        assert stored.notes == "Applied online"
        assert stored.saved_at is not None
        assert stored.clicked_apply_at is not None

    def test_application_lifecycle(self, db):
        """Test create, reject and duplicate detection through the SQL store."""
        notifier = Mock()
        service = ApplicationService(SqlApplicationStore(), notifier)

        application = service.create("cand-001", "job-001", match_score=74)
        service.transition(
            application.id, ApplicationStatus.REJECTED, rejection_reason="Need 6G"
        )

        stored = service.get(application.id)
        assert stored.status == ApplicationStatus.REJECTED
        assert stored.rejection_reason == "Need 6G"
        assert stored.match_score == 74
        notifier.notify.assert_called_once_with(
            application.id, ApplicationStatus.REJECTED, "Need 6G"
        )

        with pytest.raises(DuplicateApplicationError):
            service.create("cand-001", "job-001")
