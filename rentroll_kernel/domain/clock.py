"""
Injectable source of the current instant.

Anything that stamps a time (migration error log lines, run summaries) asks a
Clock rather than calling ``datetime.now()``, so a test can freeze time and
compare log output byte for byte.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Returns timezone-aware UTC instants."""

    @abstractmethod
    def now_utc(self) -> datetime:
        ...

    def isoformat(self, timespec: str = "milliseconds") -> str:
        """Current instant as ISO-8601 text, the form stamped on log lines."""
        return self.now_utc().isoformat(timespec=timespec)


class SystemClock(Clock):
    """Wall-clock time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Frozen clock for tests. Moves only through set_time(), advance() or tick().

    Naive start times are taken to be UTC.
    """

    DEFAULT_START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __init__(self, start: datetime | None = None):
        self._current = self._as_utc(start or self.DEFAULT_START)

    @staticmethod
    def _as_utc(value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def now_utc(self) -> datetime:
        return self._current

    def set_time(self, when: datetime) -> None:
        self._current = self._as_utc(when)

    def advance(self, seconds: float = 1) -> datetime:
        self._current += timedelta(seconds=seconds)
        return self._current

    def tick(self) -> datetime:
        return self.advance(1)
