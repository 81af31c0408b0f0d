"""Calendar arithmetic shared by bucketing, budgets and alerts."""

import calendar
from datetime import date, datetime, timezone
from decimal import Decimal


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def today_utc() -> date:
    return utc_now().date()


def days_in_month(year: int, month: int) -> int:
    """Number of days in a calendar month (leap years respected)."""
    return calendar.monthrange(year, month)[1]


def quarter_of_month(month: int) -> int:
    """Quarter (1-4) a calendar month belongs to: ceil(month / 3)."""
    return (month + 2) // 3


def month_progress(day: date) -> Decimal:
    """Fraction of the calendar month elapsed at the end of ``day``."""
    return Decimal(day.day) / Decimal(days_in_month(day.year, day.month))
