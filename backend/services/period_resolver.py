"""
period_resolver.py — Budget Periods
Turns a period kind (monthly/weekly/yearly) and a reference instant into the
calendar window a budget is measured over.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from constants import Period


def utc_now() -> datetime:
    """Naive UTC timestamp, matching how expense dates are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@dataclass(frozen=True)
class PeriodRange:
    """A period window. `end` is midnight of the last day; the whole day counts."""

    start: datetime
    end: datetime

    @property
    def end_exclusive(self) -> datetime:
        return self.end + timedelta(days=1)

    def contains(self, instant) -> bool:
        if not isinstance(instant, datetime):
            instant = datetime(instant.year, instant.month, instant.day)
        instant = to_naive_utc(instant)
        return self.start <= instant < self.end_exclusive

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def normalize_period(period_kind) -> Period:
    """Unrecognized or missing kinds fall back to monthly."""
    try:
        return Period(period_kind)
    except ValueError:
        return Period.MONTHLY


def resolve_period(period_kind, reference: date | datetime) -> PeriodRange:
    if isinstance(reference, datetime):
        reference = to_naive_utc(reference)
    day = date(reference.year, reference.month, reference.day)
    kind = normalize_period(period_kind)

    if kind is Period.WEEKLY:
        # weekday(): Monday=0 ... Sunday=6; weeks start on Sunday
        start = day - timedelta(days=(day.weekday() + 1) % 7)
        end = start + timedelta(days=6)
    elif kind is Period.YEARLY:
        start = date(day.year, 1, 1)
        end = date(day.year, 12, 31)
    else:
        start = day.replace(day=1)
        end = day.replace(day=calendar.monthrange(day.year, day.month)[1])

    return PeriodRange(
        start=datetime(start.year, start.month, start.day),
        end=datetime(end.year, end.month, end.day),
    )
