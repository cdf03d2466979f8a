"""buffer.py - Pending log lines waiting for the next export.

S3LogHandler pushes one entry per accepted record and calls ``drain()`` when
it is time to export; the returned list is the batch handed to the exporter,
so each line is exported at most once.

The buffer is unbounded and has no lock of its own. The handler bounds it by
draining at ``capacity`` and only touches it while holding the
``logging.Handler`` lock.
"""

import time
from collections import deque
from typing import List, NamedTuple


class LogEntry(NamedTuple):
    """One formatted log line.

    ``timestamp`` is a ``time.monotonic()`` value, not wall-clock time.
    """

    timestamp: float
    line: str
    level: int = 0


class LogBuffer:
    """FIFO of LogEntry objects, emptied in one piece by ``drain()``.

    Example:
        >>> buf = LogBuffer()
        >>> buf.push("2024-01-15 12:00:00 [ERROR][app] boom", level=40)
        >>> len(buf)
        1
        >>> [e.line for e in buf.drain()], len(buf)
        (['2024-01-15 12:00:00 [ERROR][app] boom'], 0)
    """

    def __init__(self) -> None:
        self._entries: deque = deque()

    def push(self, line: str, level: int = 0) -> None:
        self._entries.append(LogEntry(time.monotonic(), line, level))

    def drain(self) -> List[LogEntry]:
        """Return all entries oldest-first and leave the buffer empty."""
        entries = list(self._entries)
        self._entries.clear()
        return entries

    def __len__(self) -> int:
        return len(self._entries)
