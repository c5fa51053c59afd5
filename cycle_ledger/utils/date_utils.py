"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, time, timezone
from typing import Optional


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given calendar month"""
    return calendar.monthrange(year, month)[1]


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move (year, month) by offset months, either direction"""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def anchored_date(year: int, month: int, day: int) -> date:
    """Date for day-of-month in the given month, clamped to the month's last day"""
    return date(year, month, min(max(day, 1), days_in_month(year, month)))


def parse_iso_date(value: object) -> Optional[date]:
    """Parse YYYY-MM-DD (or a full ISO timestamp); None if unparseable"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def parse_clock_time(value: object) -> Optional[time]:
    """Parse HH:MM or HH:MM:SS; None if unparseable"""
    if isinstance(value, time):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return time.fromisoformat(value)
    except ValueError:
        return None


def month_year_key(day: date) -> str:
    """Acknowledgement period key, e.g. "3-2024" (month not zero-padded)"""
    return f"{day.month}-{day.year}"


def epoch_millis(day: date) -> int:
    """Milliseconds since the Unix epoch at midnight UTC of day"""
    midnight = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return int(midnight.timestamp() * 1000)


def short_date_label(day: date) -> str:
    """Month abbreviation and unpadded day, e.g. "Jan 27" """
    return f"{day:%b} {day.day}"
