"""Clock helpers.

All timestamps are stored as naive UTC datetimes, which is what SQLite
hands back for ``DateTime`` columns.
"""

import datetime


def utcnow() -> datetime.datetime:
    """Current time as a naive UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def seconds_from_now(seconds: float, now: datetime.datetime | None = None) -> datetime.datetime:
    """Absolute deadline ``seconds`` after ``now``."""
    return (now or utcnow()) + datetime.timedelta(seconds=seconds)


def seconds_until(deadline: datetime.datetime, now: datetime.datetime | None = None) -> float:
    """Seconds left before ``deadline``; never negative."""
    delta = deadline - (now or utcnow())
    return max(0.0, delta.total_seconds())
