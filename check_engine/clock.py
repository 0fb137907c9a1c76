"""
Check Engine - Clock.

============================================================
RESPONSIBILITY
============================================================
Testable clock abstraction for the engine.

- Identity generation, Create/Update timestamps and synthesized
  results all read time through this clock
- Enables deterministic tests with an injected clock
- UTC only

============================================================
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Generator, Optional
import threading
import time


RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_rfc3339(dt: datetime) -> str:
    """Format a datetime as RFC 3339 with second precision, in UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(RFC3339_FORMAT)


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp.

    Raises:
        ValueError: If the string is not a valid timestamp
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        raise ValueError(f"timestamp has no UTC offset: {value!r}")
    return dt.astimezone(timezone.utc)


# ============================================================
# CLOCK PROTOCOL
# ============================================================

class ClockProtocol(ABC):
    """Abstract interface for the engine clock."""

    @abstractmethod
    def now(self) -> datetime:
        """Get current UTC datetime."""
        pass

    @abstractmethod
    def now_ns(self) -> int:
        """Get current Unix time in nanoseconds."""
        pass

    def timestamp(self) -> int:
        """Get current Unix time in whole seconds."""
        return int(self.now().timestamp())

    def format_rfc3339(self, dt: Optional[datetime] = None) -> str:
        """Format a datetime (default: now) as RFC 3339."""
        return format_rfc3339(dt or self.now())


# ============================================================
# SYSTEM CLOCK (PRODUCTION)
# ============================================================

class SystemClock(ClockProtocol):
    """Production clock using actual system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def now_ns(self) -> int:
        return time.time_ns()


# ============================================================
# MOCK CLOCK (TESTING)
# ============================================================

def _as_utc(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


class MockClock(ClockProtocol):
    """
    Settable clock for tests.

    Identity generation reads now_ns(), so two creates under the
    same pinned instant produce the same identity.
    """

    _EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

    def __init__(self, initial_time: Optional[datetime] = None):
        self._current = _as_utc(initial_time or datetime.now(timezone.utc))
        self._guard = threading.Lock()

    def now(self) -> datetime:
        with self._guard:
            return self._current

    def now_ns(self) -> int:
        with self._guard:
            elapsed = self._current - self._EPOCH
        return (elapsed.days * 86_400 + elapsed.seconds) * 1_000_000_000 + elapsed.microseconds * 1_000

    def set_time(self, value: datetime) -> None:
        """Jump to an absolute instant (naive values are taken as UTC)."""
        with self._guard:
            self._current = _as_utc(value)

    def advance(self, seconds: float = 0, **delta) -> None:
        """Move forward; extra keywords go to timedelta (minutes=, hours=...)."""
        with self._guard:
            self._current += timedelta(seconds=seconds, **delta)

    @contextmanager
    def freeze(self, at_time: Optional[datetime] = None) -> Generator[None, None, None]:
        """Pin the clock (optionally at `at_time`); the prior instant is restored on exit."""
        with self._guard:
            saved = self._current
            if at_time is not None:
                self._current = _as_utc(at_time)
        try:
            yield
        finally:
            with self._guard:
                self._current = saved


_default_clock: ClockProtocol = SystemClock()


def get_clock() -> ClockProtocol:
    """Get the process default clock."""
    return _default_clock
