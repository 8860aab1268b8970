"""Timeouts and wall-clock helpers."""

from __future__ import annotations

import functools
import time as _time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

__all__ = ["Timeout", "millis_to_epoch", "current_time_millis"]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLI = timedelta(milliseconds=1)


def _wrap_i32(value: int) -> int:
    """Truncate an integer to a signed 32-bit value, wrapping on overflow."""
    return ((value + 2**31) % 2**32) - 2**31


def _check_duration(duration: object) -> timedelta:
    if not isinstance(duration, timedelta):
        raise TypeError(f"expected a timedelta, got {type(duration).__name__}")
    if duration < timedelta(0):
        raise ValueError("a timeout duration cannot be negative")
    return duration


@functools.total_ordering
@dataclass(frozen=True, eq=True)
class Timeout:
    """A timeout for a Kafka operation: a finite duration, or never.

    ``duration`` is ``None`` when the operation blocks forever.
    """

    duration: timedelta | None = None

    def __post_init__(self) -> None:
        if self.duration is not None:
            _check_duration(self.duration)

    @classmethod
    def after(cls, duration: timedelta) -> Timeout:
        """Time out after ``duration`` elapses."""
        return cls(_check_duration(duration))

    @classmethod
    def never(cls) -> Timeout:
        """Block forever."""
        return cls(None)

    @classmethod
    def from_value(cls, value: Timeout | timedelta | None) -> Timeout:
        """Build a timeout from a timedelta, ``None`` (never) or a timeout."""
        if isinstance(value, Timeout):
            return value
        if value is None:
            return cls.never()
        return cls.after(value)

    @property
    def is_never(self) -> bool:
        return self.duration is None

    def as_millis(self) -> int:
        """Milliseconds as a signed 32-bit value; -1 means never."""
        if self.duration is None:
            return -1
        return _wrap_i32(self.duration // _ONE_MILLI)

    def __sub__(self, other: Timeout) -> Timeout:
        if not isinstance(other, Timeout):
            return NotImplemented
        if other.duration is None:
            raise ValueError("subtraction of a never-ending timeout is ill-defined")
        if self.duration is None:
            return self
        if other.duration > self.duration:
            raise ValueError("overflow when subtracting timeout durations")
        return Timeout(self.duration - other.duration)

    def __lt__(self, other: Timeout) -> bool:
        if not isinstance(other, Timeout):
            return NotImplemented
        if self.duration is None:
            return False
        if other.duration is None:
            return True
        return self.duration < other.duration


def millis_to_epoch(time: datetime) -> int:
    """Milliseconds since the Unix epoch; times before it give 0.

    A naive datetime is taken to be in UTC.
    """
    if time.tzinfo is None:
        time = time.replace(tzinfo=timezone.utc)
    elapsed = time - _EPOCH
    if elapsed < timedelta(0):
        return 0
    return elapsed // _ONE_MILLI


def current_time_millis() -> int:
    """The current time in milliseconds since the Unix epoch."""
    return _time.time_ns() // 1_000_000