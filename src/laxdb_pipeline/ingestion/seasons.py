from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, tzinfo

# Feb allows 29 so leap-day boundaries stay expressible.
_DAYS_IN_MONTH = (31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


class SeasonConfigError(ValueError):
    """Static season configuration is malformed."""


@dataclass(frozen=True, order=True)
class SeasonDate:
    """A month/day pair with no year attached."""

    month: int
    day: int

    def __post_init__(self) -> None:
        if not isinstance(self.month, int) or not 1 <= self.month <= 12:
            raise SeasonConfigError(f"Invalid season month: {self.month!r}")
        if not isinstance(self.day, int) or not 1 <= self.day <= _DAYS_IN_MONTH[self.month - 1]:
            raise SeasonConfigError(f"Invalid season day {self.day!r} for month {self.month}")


@dataclass(frozen=True)
class SeasonWindow:
    """Annual active period for a source.

    A window whose start month is after its end month wraps the year boundary:
    it is active from `start` through Dec 31 and from Jan 1 through `end`.
    """

    start: SeasonDate
    end: SeasonDate
    historical: bool = False

    @property
    def wraps(self) -> bool:
        return self.start.month > self.end.month


@dataclass(frozen=True)
class SourceDescriptor:
    code: str
    name: str
    priority: int
    window: SeasonWindow


def calendar_date(value: date | datetime, tz: tzinfo | None = None) -> date:
    """Return the calendar date for `value`, converting aware datetimes into `tz` first."""

    if isinstance(value, datetime):
        if tz is not None and value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def is_active(day: date | datetime, window: SeasonWindow, *, tz: tzinfo | None = None) -> bool:
    """Return True if `day` falls inside `window` (inclusive on both ends).

    Historical windows are never active.
    """

    if window.historical:
        return False

    d = calendar_date(day, tz)
    current = (d.month, d.day)
    start = (window.start.month, window.start.day)
    end = (window.end.month, window.end.day)

    if window.wraps:
        return current >= start or current <= end
    return start <= current <= end


def active_sources(
    day: date | datetime,
    sources: Iterable[SourceDescriptor],
    *,
    tz: tzinfo | None = None,
) -> list[SourceDescriptor]:
    """Sources whose season window contains `day`, in input order."""

    return [source for source in sources if is_active(day, source.window, tz=tz)]


def schedulable_sources(sources: Iterable[SourceDescriptor]) -> list[SourceDescriptor]:
    """Every non-historical source, regardless of date."""

    return [source for source in sources if not source.window.historical]
