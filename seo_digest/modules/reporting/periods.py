"""Current and previous comparison windows."""

from datetime import date, timedelta
from typing import Optional

from seo_digest.models import Period, ReportPeriods

DEFAULT_PERIOD_DAYS = 30
SEARCH_WINDOW_DAYS = 28


def get_periods(end_date: Optional[date] = None, days: int = DEFAULT_PERIOD_DAYS) -> ReportPeriods:
    """Return the period ending at *end_date* and the one right before it.

    ``current = [end - days, end]`` and ``previous`` ends the day before
    ``current`` starts and spans the same number of days.
    """
    end = end_date or date.today()
    current_start = end - timedelta(days=days)
    previous_end = current_start - timedelta(days=1)
    previous_start = previous_end - timedelta(days=days)
    return ReportPeriods(
        current=Period(current_start, end),
        previous=Period(previous_start, previous_end),
    )


def get_search_periods(end_date: Optional[date] = None, days: int = SEARCH_WINDOW_DAYS) -> ReportPeriods:
    """The "last N days" Search Console window (N calendar days inclusive)."""
    return get_periods(end_date, days=days - 1)
