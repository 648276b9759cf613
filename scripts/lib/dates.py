"""
Date window helpers.

A DateWindow is an optional inclusive [start, end] range built from ISO
calendar dates. The end bound is pushed to the last instant of its day
(23:59:59.999) so a single-day window covers the whole day.

Window bounds carry no time zone of their own: a naive bound compared with an
aware timestamp is read in that timestamp's zone, so a calendar day means the
same wall-clock day the event was stored in.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from scripts.lib.errors import ValidationError

END_OF_DAY = time(23, 59, 59, 999000)

_DATETIME = TypeAdapter(datetime)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string, epoch seconds or datetime; None when unusable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    text = str(value).strip()
    try:
        # Handle ISO format with or without trailing Z / offset
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    # PostgREST trims trailing zeros from fractions (".12"), which
    # fromisoformat rejects before Python 3.11.
    try:
        return _DATETIME.validate_python(text)
    except PydanticValidationError:
        return None


def parse_calendar_date(value: Optional[str], field: str) -> Optional[date]:
    """Parse a YYYY-MM-DD query parameter; None passes through."""
    if value is None or value == "":
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except (ValueError, AttributeError):
        raise ValidationError(
            f"Parameter {field} must be an ISO date (YYYY-MM-DD), got '{value}'",
            field=field,
        )


def _aligned(bound: datetime, ts: datetime):
    if bound.tzinfo is None and ts.tzinfo is not None:
        return bound.replace(tzinfo=ts.tzinfo), ts
    if bound.tzinfo is not None and ts.tzinfo is None:
        return bound, ts.replace(tzinfo=bound.tzinfo)
    return bound, ts


@dataclass(frozen=True)
class DateWindow:
    """Inclusive [start, end] filter; either bound may be absent."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def from_dates(cls, start: Optional[date] = None, end: Optional[date] = None) -> "DateWindow":
        if start is not None and end is not None and start > end:
            raise ValidationError(
                f"startDate {start.isoformat()} is after endDate {end.isoformat()}",
                field="startDate",
            )
        return cls(
            start=datetime.combine(start, time.min) if start is not None else None,
            end=datetime.combine(end, END_OF_DAY) if end is not None else None,
        )

    @classmethod
    def from_strings(cls, start: Optional[str] = None, end: Optional[str] = None) -> "DateWindow":
        return cls.from_dates(
            parse_calendar_date(start, "startDate"),
            parse_calendar_date(end, "endDate"),
        )

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, ts: Optional[datetime]) -> bool:
        """True when ts falls inside the window, both ends inclusive."""
        if self.is_unbounded:
            return True
        if ts is None:
            return False
        if self.start is not None:
            start, moment = _aligned(self.start, ts)
            if moment < start:
                return False
        if self.end is not None:
            end, moment = _aligned(self.end, ts)
            if moment > end:
                return False
        return True

    def as_query_bounds(self):
        """ISO strings for a pushed-down range filter: (gte, lte)."""
        return (
            self.start.isoformat() if self.start is not None else None,
            self.end.isoformat() if self.end is not None else None,
        )

    def describe(self) -> str:
        start = self.start.date().isoformat() if self.start else "-"
        end = self.end.date().isoformat() if self.end else "-"
        return f"[{start} .. {end}]"


NO_WINDOW = DateWindow()
