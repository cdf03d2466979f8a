"""test_buffer.py - Unit tests for LogBuffer and LogEntry.

Covers:
    - LogEntry field storage and immutability
    - LogBuffer push, len, drain
    - drain(): returns entries oldest-first AND empties the buffer
    - The buffer never evicts on its own
"""

import logging
import time

import pytest

from s3logger.buffer import LogBuffer, LogEntry


# ---------------------------------------------------------------------------
# LogEntry
# ---------------------------------------------------------------------------


class TestLogEntry:
    def test_log_entry_stores_fields(self):
        ts = time.monotonic()
        entry = LogEntry(ts, "boom", logging.ERROR)

        assert entry.timestamp == ts
        assert entry.line == "boom"
        assert entry.level == logging.ERROR

    def test_log_entry_default_level_is_zero(self):
        assert LogEntry(0.0, "hello").level == 0

    def test_log_entry_is_immutable(self):
        """A drained batch cannot be altered by the exporter."""
        entry = LogEntry(0.0, "test", 10)
        with pytest.raises(AttributeError):
            entry.line = "changed"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# LogBuffer
# ---------------------------------------------------------------------------


class TestLogBuffer:
    def test_initial_length_is_zero(self):
        assert len(LogBuffer()) == 0

    def test_push_stores_line_and_level(self):
        buf = LogBuffer()
        buf.push("careful", level=logging.WARNING)

        [entry] = buf.drain()
        assert entry.line == "careful"
        assert entry.level == logging.WARNING

    def test_push_records_monotonic_timestamp(self):
        buf = LogBuffer()
        before = time.monotonic()
        buf.push("x")
        after = time.monotonic()
        assert before <= buf.drain()[0].timestamp <= after

    def test_drain_returns_entries_oldest_first(self):
        buf = LogBuffer()
        for line in ("A", "B", "C"):
            buf.push(line)
        assert [e.line for e in buf.drain()] == ["A", "B", "C"]

    def test_drain_empties_the_buffer(self):
        """Each entry is handed out exactly once."""
        buf = LogBuffer()
        buf.push("A")
        buf.drain()
        assert len(buf) == 0
        assert buf.drain() == []

    def test_drained_list_is_independent_of_later_pushes(self):
        buf = LogBuffer()
        buf.push("A")
        batch = buf.drain()
        buf.push("B")
        assert [e.line for e in batch] == ["A"]

    def test_buffer_does_not_evict(self):
        """Nothing is dropped until the buffer is drained."""
        buf = LogBuffer()
        for i in range(5000):
            buf.push(str(i))
        assert len(buf) == 5000
        assert buf.drain()[0].line == "0"
