"""test_keys.py - Unit tests for daily and archive key naming.

Covers:
    - current_key() format, slash trimming and empty directory
    - parse_sequence() for archives, current objects and foreign keys
    - next_archive_key() on empty listings, gaps and dotted directories
    - utc_day() conversion of aware and naive datetimes
"""

from datetime import date, datetime, timedelta, timezone

from s3logger.keys import (
    archive_prefix,
    current_key,
    next_archive_key,
    parse_sequence,
    utc_day,
)


# ---------------------------------------------------------------------------
# current_key() / archive_prefix()
# ---------------------------------------------------------------------------


class TestCurrentKey:
    def test_current_key_joins_directory_and_date(self):
        """The current key is '{directory}/{date}.log'."""
        assert current_key("_logs", "2024-01-15") == "_logs/2024-01-15.log"

    def test_current_key_accepts_date_objects(self):
        """date and datetime values are rendered as ISO dates."""
        assert current_key("_logs", date(2024, 1, 5)) == "_logs/2024-01-05.log"
        assert current_key("_logs", datetime(2024, 1, 5, 23, 59)) == "_logs/2024-01-05.log"

    def test_current_key_with_empty_directory_has_no_leading_slash(self):
        """Root-level logs produce a bare '{date}.log' key."""
        assert current_key("", "2024-01-15") == "2024-01-15.log"

    def test_current_key_strips_outer_slashes(self):
        """Leading and trailing slashes on the directory are dropped."""
        assert current_key("/app/logs/", "2024-01-15") == "app/logs/2024-01-15.log"

    def test_slash_wrapped_directory_never_doubles_slashes(self):
        """A trailing slash on the directory does not leak into any key."""
        assert archive_prefix("app/logs/", "2024-01-15") == "app/logs/2024-01-15"
        assert next_archive_key("/app/logs/", "2024-01-15", []) == "app/logs/2024-01-15.1.log"
        assert current_key("/", "2024-01-15") == "2024-01-15.log"

    def test_archive_prefix_covers_current_and_archives(self):
        """The archive prefix is a prefix of both the current and archive keys."""
        prefix = archive_prefix("_logs", "2024-01-15")
        assert prefix == "_logs/2024-01-15"
        assert current_key("_logs", "2024-01-15").startswith(prefix)
        assert next_archive_key("_logs", "2024-01-15", []).startswith(prefix)


# ---------------------------------------------------------------------------
# parse_sequence()
# ---------------------------------------------------------------------------


class TestParseSequence:
    def test_parse_sequence_reads_archive_number(self):
        assert parse_sequence("_logs/2024-01-15.7.log") == 7

    def test_parse_sequence_current_object_is_zero(self):
        """The current object has no numeric suffix and counts as 0."""
        assert parse_sequence("_logs/2024-01-15.log") == 0

    def test_parse_sequence_foreign_key_is_zero(self):
        assert parse_sequence("_logs/2024-01-15.notes.txt") == 0

    def test_parse_sequence_ignores_dots_in_directory(self):
        """A numeric segment in the directory is not mistaken for a sequence."""
        assert parse_sequence("logs.42/2024-01-15.log") == 0
        assert parse_sequence("logs.42/2024-01-15.3.log") == 3


# ---------------------------------------------------------------------------
# next_archive_key()
# ---------------------------------------------------------------------------


class TestNextArchiveKey:
    def test_next_archive_key_on_empty_listing_is_one(self):
        """An empty listing yields sequence 1, not 0 and not an error."""
        assert next_archive_key("_logs", "2024-01-15", []) == "_logs/2024-01-15.1.log"

    def test_next_archive_key_only_current_object_is_one(self):
        keys = ["_logs/2024-01-15.log"]
        assert next_archive_key("_logs", "2024-01-15", keys) == "_logs/2024-01-15.1.log"

    def test_next_archive_key_tolerates_gaps(self):
        """Sequence is max + 1, gaps are not filled."""
        keys = ["_logs/2024-01-15.1.log", "_logs/2024-01-15.3.log"]
        assert next_archive_key("_logs", "2024-01-15", keys) == "_logs/2024-01-15.4.log"

    def test_next_archive_key_is_order_independent(self):
        keys = ["_logs/2024-01-15.10.log", "_logs/2024-01-15.log", "_logs/2024-01-15.2.log"]
        assert next_archive_key("_logs", "2024-01-15", keys) == "_logs/2024-01-15.11.log"

    def test_next_archive_key_accepts_generators(self):
        keys = (k for k in ["_logs/2024-01-15.1.log"])
        assert next_archive_key("_logs", "2024-01-15", keys) == "_logs/2024-01-15.2.log"

    def test_next_archive_key_with_empty_directory(self):
        assert next_archive_key("", "2024-01-15", ["2024-01-15.log"]) == "2024-01-15.1.log"


# ---------------------------------------------------------------------------
# utc_day()
# ---------------------------------------------------------------------------


class TestUtcDay:
    def test_utc_day_converts_aware_datetime_to_utc(self):
        """23:30 at UTC-05:00 is already the next day in UTC."""
        tz = timezone(timedelta(hours=-5))
        assert utc_day(datetime(2024, 1, 15, 23, 30, tzinfo=tz)) == date(2024, 1, 16)

    def test_utc_day_treats_naive_datetime_as_utc(self):
        assert utc_day(datetime(2024, 1, 15, 23, 30)) == date(2024, 1, 15)

    def test_utc_day_defaults_to_now(self):
        assert utc_day() == datetime.now(timezone.utc).date()
