"""Unit tests for timestamp utilities."""

from datetime import datetime, timedelta, timezone

from tradematch.utils.timestamps import (
    ensure_utc,
    epoch_seconds,
    format_timestamp,
    parse_timestamp,
    utc_now,
)


class TestUtcNow:
    """Tests for utc_now function."""

    def test_utc_now_returns_utc_datetime(self):
        """Test that utc_now returns a timezone-aware datetime in UTC."""
        now = utc_now()

        assert isinstance(now, datetime)
        assert now.tzinfo == timezone.utc

    def test_utc_now_is_recent(self):
        """Test that utc_now returns a recent timestamp."""
        before = datetime.now(timezone.utc)
        now = utc_now()
        after = datetime.now(timezone.utc)

        assert before <= now <= after


class TestEnsureUtc:
    """Tests for ensure_utc function."""

    def test_none(self):
        """Test that None input returns None."""
        assert ensure_utc(None) is None

    def test_naive_datetime_is_treated_as_utc(self):
        """Test that a naive datetime gets UTC attached without shifting."""
        result = ensure_utc(datetime(2025, 11, 4, 12, 0, 0))

        assert result.tzinfo == timezone.utc
        assert result.hour == 12

    def test_other_timezone_is_converted(self):
        """Test that 12:00 at UTC-5 becomes 17:00 UTC."""
        est = timezone(timedelta(hours=-5))

        result = ensure_utc(datetime(2025, 11, 4, 12, 0, 0, tzinfo=est))

        assert result.tzinfo == timezone.utc
        assert result.hour == 17


class TestEpochSeconds:
    def test_none_is_epoch(self):
        """Test a missing datetime sorts as the oldest possible value."""
        assert epoch_seconds(None) == 0.0

    def test_known_value(self):
        """Test a fixed instant converts to its Unix time."""
        assert epoch_seconds(datetime(2025, 11, 4, 0, 0, tzinfo=timezone.utc)) == 1762214400.0

    def test_naive_matches_aware(self):
        """Test naive values are read as UTC."""
        naive = datetime(2025, 11, 4, 12, 0)

        assert epoch_seconds(naive) == epoch_seconds(naive.replace(tzinfo=timezone.utc))


class TestFormatTimestamp:
    def test_format_with_microseconds_and_z(self):
        """Test storage format keeps microseconds and ends with Z."""
        dt = datetime(2025, 11, 4, 12, 30, 45, 123456, tzinfo=timezone.utc)

        assert format_timestamp(dt) == "2025-11-04T12:30:45.123456Z"

    def test_format_converts_to_utc(self):
        """Test an offset datetime is stored in UTC."""
        cet = timezone(timedelta(hours=1))
        dt = datetime(2025, 11, 4, 13, 0, 0, tzinfo=cet)

        assert format_timestamp(dt) == "2025-11-04T12:00:00.000000Z"

    def test_format_none(self):
        """Test None stays None."""
        assert format_timestamp(None) is None


class TestParseTimestamp:
    def test_parse_storage_format(self):
        """Test the storage format parses back to the same instant."""
        dt = datetime(2025, 11, 4, 12, 30, 45, 123456, tzinfo=timezone.utc)

        assert parse_timestamp(format_timestamp(dt)) == dt

    def test_parse_without_microseconds(self):
        """Test values without fractional seconds are accepted."""
        result = parse_timestamp("2025-11-04T12:00:00Z")

        assert result == datetime(2025, 11, 4, 12, 0, 0, tzinfo=timezone.utc)

    def test_parse_without_suffix(self):
        """Test values without Z are read as UTC."""
        assert parse_timestamp("2025-11-04T12:00:00").tzinfo == timezone.utc

    def test_parse_empty(self):
        """Test empty values return None."""
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None
