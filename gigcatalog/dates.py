"""
Event date validation with year-inference correction.

Scrapers that see "January 15" on a December listing often assign the
current year, and some push already-current dates a year forward. Dates are
only corrected inside narrow windows; anything else is rejected, since a
missed event reappears on the next run while a revived stale listing does not
go away.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from gigcatalog.config import Config

SECONDS_PER_DAY = 60 * 60 * 24


@dataclass
class DateCheck:
    """Outcome of validating one start time"""
    valid: bool
    reason: Optional[str] = None
    corrected_date: Optional[datetime] = None


def shift_year(dt: datetime, years: int) -> datetime:
    """Move a datetime by whole years; Feb 29 lands on Feb 28 in non-leap years."""
    try:
        return dt.replace(year=dt.year + years)
    except ValueError:
        return dt.replace(year=dt.year + years, day=28)


def _midnight(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _days_between(later: datetime, earlier: datetime) -> float:
    return (later - earlier).total_seconds() / SECONDS_PER_DAY


def months_ahead(event_month: int, current_month: int) -> int:
    """How many months the event month is ahead of the current one, wrapping at 12."""
    return (event_month - current_month) % 12


def is_valid_event_date(starts_at: datetime, now: Optional[datetime] = None) -> DateCheck:
    """
    Validate a scraped start time, correcting likely year-inference errors.

    Returns DateCheck(valid=True) for dates 0-300 days out, a corrected date
    for plausible off-by-one-year errors, or DateCheck(valid=False, reason).
    """
    now = now or datetime.now()
    today = _midnight(now)
    days_from_now = _days_between(_midnight(starts_at), today)

    if days_from_now >= 0:
        if days_from_now <= Config.FUTURE_WINDOW_DAYS:
            return DateCheck(valid=True)

        corrected = shift_year(starts_at, -1)
        corrected_days = _days_between(corrected, today)
        if -Config.RECENT_PAST_DAYS <= corrected_days <= Config.FUTURE_WINDOW_DAYS:
            return DateCheck(valid=True, corrected_date=corrected)

        return DateCheck(valid=False, reason='too far in future (>10 months)')

    if -days_from_now <= Config.RECENT_PAST_DAYS:
        return DateCheck(valid=False, reason='past event (recent)')

    # Only year-wrap shapes: in December, a January-March date
    if 1 <= months_ahead(starts_at.month, now.month) <= 3:
        corrected = shift_year(starts_at, 1)
        corrected_days = _days_between(corrected, today)
        if 0 <= corrected_days <= Config.YEAR_WRAP_WINDOW_DAYS:
            return DateCheck(valid=True, corrected_date=corrected)

    return DateCheck(valid=False, reason='past event')
