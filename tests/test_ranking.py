"""Unit tests for the list ranker.

Tests rank() for:
- Match, posted-date and pay sorting
- Stability of equal keys
- Query, location, source and active filters
- The good-matches filter and unscored rows
- Status filtering over interactions and applications
"""

from datetime import datetime, timedelta, timezone

import pytest

from tradematch.domain.models import (
    Application,
    ApplicationStatus,
    Interaction,
    InteractionStatus,
)
from tradematch.ranking import FilterSpec, SortOrder, rank
from tests.helpers import make_row

BASE_TIME = datetime(2025, 11, 1, 12, 0, 0, tzinfo=timezone.utc)


def ids(rows):
    return [row.job.id for row in rows]


def interaction(job_id, status):
    return Interaction(id=f"int-{job_id}", candidate_id="cand-001", job_id=job_id, status=status)


class TestSortByMatch:
    """Highest display score first."""

    def test_descending_score(self):
        """Test rows come back highest score first."""
        rows = [make_row("a", score=40), make_row("b", score=90), make_row("c", score=65)]

        assert ids(rank(rows, FilterSpec(sort_by=SortOrder.MATCH))) == ["b", "c", "a"]

    def test_equal_scores_keep_input_order(self):
        """Test the sort is stable for equal scores."""
        rows = [
            make_row("first", score=80),
            make_row("second", score=80),
            make_row("third", score=95),
            make_row("fourth", score=80),
        ]

        result = rank(rows, FilterSpec(sort_by="match"))

        assert ids(result) == ["third", "first", "second", "fourth"]

    def test_unscored_rows_sort_last(self):
        """Test rows without any score follow even a score of 0."""
        rows = [make_row("none-1"), make_row("zero", score=0), make_row("none-2"),
                make_row("high", score=70)]

        result = rank(rows, FilterSpec(sort_by=SortOrder.MATCH))

        assert ids(result) == ["high", "zero", "none-1", "none-2"]

    def test_external_score_drives_sort(self):
        """Test the external score is used over the internal one."""
        rows = [make_row("a", score=95, external=30), make_row("b", score=20, external=60)]

        assert ids(rank(rows, FilterSpec(sort_by=SortOrder.MATCH))) == ["b", "a"]


class TestSortByPosted:
    """Newest posting first."""

    def test_newest_first(self):
        """Test the default sort is newest first."""
        rows = [
            make_row("old", posted_at=BASE_TIME - timedelta(days=3)),
            make_row("new", posted_at=BASE_TIME),
            make_row("mid", posted_at=BASE_TIME - timedelta(days=1)),
        ]

        assert ids(rank(rows)) == ["new", "mid", "old"]

    def test_missing_posted_date_sorts_last(self):
        """Test a posting without a date is treated as the oldest."""
        rows = [make_row("undated", posted_at=None), make_row("dated", posted_at=BASE_TIME)]

        assert ids(rank(rows, FilterSpec(sort_by=SortOrder.POSTED))) == ["dated", "undated"]


class TestSortByPay:
    """Highest annualized pay midpoint first."""

    def test_hourly_and_salary_compare_on_one_scale(self):
        """Test $30/hr (62,400/yr) sorts above a 55,000 salary."""
        rows = [
            make_row("salary", pay={"minimum": 50000, "maximum": 60000, "period": "salary"}),
            make_row("hourly", pay={"minimum": 25, "maximum": 35, "period": "hourly"}),
            make_row("display", pay={"display": "$70K - $80K a year"}),
        ]

        assert ids(rank(rows, FilterSpec(sort_by=SortOrder.PAY))) == [
            "display",
            "hourly",
            "salary",
        ]

    def test_unreadable_pay_sorts_last(self):
        """Test DOE, free text and missing pay come after readable pay."""
        rows = [
            make_row("doe", pay={"period": "doe"}),
            make_row("missing"),
            make_row("paid", pay={"display": "$22/hr"}),
            make_row("text", pay={"display": "Competitive"}),
        ]

        assert ids(rank(rows, FilterSpec(sort_by=SortOrder.PAY))) == [
            "paid",
            "doe",
            "missing",
            "text",
        ]


class TestFilters:
    """Every set filter must pass."""

    @pytest.fixture
    def rows(self):
        return [
            make_row("welder", title="Pipe Welder", employer_name="Acme Piping",
                     location="Baton Rouge, LA", source="Indeed", posted_at=BASE_TIME),
            make_row("fitter", title="Pipefitter", employer_name="Gulf Fabrication",
                     location="Houston, TX", source="LinkedIn",
                     posted_at=BASE_TIME - timedelta(days=1)),
            make_row("inspector", title="Weld Inspector", employer_name="Coastal QA",
                     location="Mobile, AL", is_active=False,
                     posted_at=BASE_TIME - timedelta(days=2)),
        ]

    def test_no_filters_keeps_everything(self, rows):
        """Test an empty FilterSpec drops nothing."""
        assert ids(rank(rows, FilterSpec())) == ["welder", "fitter", "inspector"]

    def test_query_matches_title_case_insensitively(self, rows):
        """Test the query matches job titles ignoring case."""
        assert ids(rank(rows, FilterSpec(query="PIPE"))) == ["welder", "fitter"]

    def test_query_matches_employer_and_location(self, rows):
        """Test the query also searches employer name and location."""
        assert ids(rank(rows, FilterSpec(query="gulf"))) == ["fitter"]
        assert ids(rank(rows, FilterSpec(query="mobile"))) == ["inspector"]

    def test_blank_query_is_ignored(self, rows):
        """Test a whitespace-only query does not filter."""
        assert len(rank(rows, FilterSpec(query="   "))) == 3

    def test_location_filter(self, rows):
        """Test the location filter is a case-insensitive substring match."""
        assert ids(rank(rows, FilterSpec(location=", tx"))) == ["fitter"]

    def test_source_filter_is_exact(self, rows):
        """Test the source filter drops other sources and first-party postings."""
        assert ids(rank(rows, FilterSpec(source="Indeed"))) == ["welder"]
        assert rank(rows, FilterSpec(source="indeed")) == []

    def test_active_only(self, rows):
        """Test inactive postings are dropped when requested."""
        assert ids(rank(rows, FilterSpec(active_only=True))) == ["welder", "fitter"]

    def test_filters_combine(self, rows):
        """Test all filters must pass together."""
        result = rank(rows, FilterSpec(query="weld", active_only=True))

        assert ids(result) == ["welder"]

    def test_input_is_not_mutated(self, rows):
        """Test rank returns a new list and leaves the input untouched."""
        original = list(rows)

        rank(rows, FilterSpec(active_only=True, sort_by=SortOrder.MATCH))

        assert rows == original


class TestGoodMatchesOnly:
    def test_keeps_scores_at_or_above_70(self):
        """Test the threshold is inclusive at 70."""
        rows = [make_row("a", score=69), make_row("b", score=70), make_row("c", score=88)]

        result = rank(rows, FilterSpec(good_matches_only=True, sort_by=SortOrder.MATCH))

        assert ids(result) == ["c", "b"]

    def test_drops_unscored_rows(self):
        """Test rows with no score are dropped rather than treated as neutral."""
        rows = [make_row("unscored"), make_row("scored", score=75)]

        assert ids(rank(rows, FilterSpec(good_matches_only=True))) == ["scored"]

    def test_uses_external_score(self):
        """Test a low internal score is kept when the external score is good."""
        rows = [make_row("a", score=30, external=80), make_row("b", score=90, external=40)]

        assert ids(rank(rows, FilterSpec(good_matches_only=True))) == ["a"]


class TestStatusFilter:
    def test_rows_without_state_are_new(self):
        """Test a row with no lifecycle record has status new."""
        rows = [
            make_row("fresh"),
            make_row("saved", state=interaction("saved", InteractionStatus.SAVED)),
        ]

        assert ids(rank(rows, FilterSpec(statuses={"new"}))) == ["fresh"]

    def test_accepts_enum_members(self):
        """Test statuses may be given as enum members."""
        rows = [
            make_row("saved", state=interaction("saved", InteractionStatus.SAVED)),
            make_row("applied", state=interaction("applied", InteractionStatus.APPLIED)),
            make_row("passed", state=interaction("passed", InteractionStatus.NOT_INTERESTED)),
        ]

        result = rank(
            rows,
            FilterSpec(statuses={InteractionStatus.SAVED, InteractionStatus.APPLIED}),
        )

        assert ids(result) == ["saved", "applied"]

    def test_application_statuses(self):
        """Test first-party rows filter on their application status."""
        application = Application(
            id="app-1", candidate_id="cand-001", job_id="hired",
            status=ApplicationStatus.INTERVIEW,
        )
        rows = [make_row("hired", state=application), make_row("other")]

        assert ids(rank(rows, FilterSpec(statuses=["interview"]))) == ["hired"]

    def test_empty_status_set_drops_everything(self):
        """Test an explicit empty set matches nothing."""
        assert rank([make_row("a")], FilterSpec(statuses=set())) == []


class TestFilterSpec:
    def test_sort_by_accepts_strings(self):
        """Test string sort keys are coerced to SortOrder."""
        assert FilterSpec(sort_by="pay").sort_by is SortOrder.PAY

    def test_invalid_sort_by_raises(self):
        """Test an unknown sort key is rejected."""
        with pytest.raises(ValueError):
            FilterSpec(sort_by="salary")
