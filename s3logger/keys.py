"""keys.py - Object key naming for daily log objects and their archives.

Every UTC day has one *current* object that receives appended batches::

    _logs/2024-01-15.log

When the current object grows past the rotation threshold it is copied to the
next free archive key for that day before a fresh current object is started::

    _logs/2024-01-15.1.log
    _logs/2024-01-15.2.log

Archive sequence numbers start at 1 and only ever grow. Gaps (for example
after a retention sweep or a manual delete) are tolerated: the next number is
always one more than the highest number still present.
"""

import re
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Union

Day = Union[date, str]

_SEQUENCE_RE = re.compile(r"\.(\d+)\.log$")


def _day_str(day: Day) -> str:
    if isinstance(day, datetime):
        return day.date().isoformat()
    if isinstance(day, date):
        return day.isoformat()
    return str(day)


def _join(directory: str, name: str) -> str:
    return "/".join(part for part in (directory.strip("/"), name) if part)


def utc_day(now: Optional[datetime] = None) -> date:
    """Return the UTC calendar date for ``now`` (default: the current time).

    Naive datetimes are assumed to already be in UTC.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.date()


def current_key(directory: str, day: Day) -> str:
    """Return the key of the object that receives appends for ``day``.

    Example:
        >>> current_key("_logs", "2024-01-15")
        '_logs/2024-01-15.log'
        >>> current_key("", "2024-01-15")
        '2024-01-15.log'
    """
    return _join(directory, f"{_day_str(day)}.log")


def archive_prefix(directory: str, day: Day) -> str:
    """Return the listing prefix shared by ``day``'s current object and archives."""
    return _join(directory, _day_str(day))


def parse_sequence(key: str) -> int:
    """Return the archive sequence number encoded in ``key``.

    Only the basename is inspected, so dots in the directory part are
    harmless. Keys without a numeric suffix (the current object itself, or
    anything foreign under the prefix) count as sequence 0.

    Example:
        >>> parse_sequence("_logs/2024-01-15.3.log")
        3
        >>> parse_sequence("_logs/2024-01-15.log")
        0
    """
    basename = key.rsplit("/", 1)[-1]
    match = _SEQUENCE_RE.search(basename)
    if match is None:
        return 0
    return int(match.group(1))


def next_archive_key(directory: str, day: Day, existing_keys: Iterable[str]) -> str:
    """Return the archive key one past the highest sequence in ``existing_keys``.

    Args:
        directory: Log directory inside the bucket. May be empty.
        day: The UTC day the archive belongs to.
        existing_keys: Keys currently stored under ``archive_prefix(directory, day)``.
            May be empty, in which case the first archive (sequence 1) is returned.

    Returns:
        A key of the form ``{directory}/{day}.{sequence}.log``.
    """
    highest = max((parse_sequence(key) for key in existing_keys), default=0)
    return _join(directory, f"{_day_str(day)}.{highest + 1}.log")
