"""Report filter state and the record predicate built from it."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional


class StatusFilter(Enum):
    """Property status filter."""
    ALL = "all"
    LISTED = "listed"
    SOLD = "sold"


class DateRange(Enum):
    """Listed-date window filter."""
    ALL = "all"
    LAST_30_DAYS = "last30"
    LAST_90_DAYS = "last90"

    @property
    def days(self) -> Optional[int]:
        return {DateRange.LAST_30_DAYS: 30, DateRange.LAST_90_DAYS: 90}.get(self)


@dataclass(frozen=True)
class FilterState:
    """Current filter inputs of a report view."""
    search: str = ""
    agent: str = ""
    agency: str = ""
    suburb: str = ""
    status: StatusFilter = StatusFilter.ALL
    date_range: DateRange = DateRange.ALL


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetimes become naive local time so they compare with naive ones."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def _contains(needle: str, haystack: Optional[str]) -> bool:
    needle = (needle or "").strip().lower()
    if not needle:
        return True
    return needle in (haystack or "").lower()


class FilterPredicate:
    """Decides whether a record is part of the current report view.

    One predicate is built per computation and shared by every grouping
    dimension, so agency, agent, suburb and street views always agree.
    `now` is captured once at construction.
    """

    def __init__(self, filters: FilterState = None, now: datetime = None):
        self.filters = filters or FilterState()
        self.now = _naive(now) or datetime.now()

        days = self.filters.date_range.days
        self.cutoff: Optional[datetime] = self.now - timedelta(days=days) if days else None

    def matches(
        self,
        agency: str = "",
        agent: str = "",
        suburb: str = "",
        street: str = "",
        sold: Optional[bool] = None,
        on: Optional[datetime] = None,
        dated: bool = True
    ) -> bool:
        """Test a record's normalized names, sold state and date.

        `sold=None` means the record has no sold state (activities) and
        passes any status filter. `dated=False` skips the date check for
        records whose window is tested with overlaps().
        """
        f = self.filters

        if f.search.strip():
            if not any(_contains(f.search, value) for value in (agency, agent, suburb, street)):
                return False

        if not (_contains(f.agent, agent) and _contains(f.agency, agency) and _contains(f.suburb, suburb)):
            return False

        if sold is not None:
            if f.status == StatusFilter.SOLD and not sold:
                return False
            if f.status == StatusFilter.LISTED and sold:
                return False

        if dated and self.cutoff is not None:
            if on is None or _naive(on) < self.cutoff:
                return False

        return True

    def overlaps(self, start: Optional[datetime], end: Optional[datetime]) -> bool:
        """Whether a plan's [start, end] window overlaps the filter window."""
        if self.cutoff is None:
            return True
        if start is not None and _naive(start) > self.now:
            return False
        if end is not None and _naive(end) < self.cutoff:
            return False
        return True
