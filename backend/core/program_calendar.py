"""
Calendar arithmetic for date-driven RtF programs.

Program dates are calendar dates in the program's IANA timezone. Week
numbers are counted from the start date and shifted by the routine's
start week so a program entered mid-cycle begins at that week.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from application.exceptions import BadRequestError
from domain.models import Routine


def get_zone(tz_name: str) -> ZoneInfo:
    """Resolve an IANA timezone or raise BadRequestError."""
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise BadRequestError(f"Invalid program timezone: {tz_name}")


def local_date(moment: datetime, tz_name: str) -> date:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(get_zone(tz_name)).date()


def weekday_index(day: date) -> int:
    """Weekday as 0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7


def clamp_start_week(start_week: Optional[int], total_weeks: int) -> int:
    return min(max(start_week or 1, 1), total_weeks)


def program_end_date(start_date: date, total_weeks: int, start_week: int) -> date:
    """Last calendar day of the remaining window from the start week."""
    remaining_weeks = total_weeks - (start_week - 1)
    return start_date + timedelta(days=remaining_weeks * 7 - 1)


def current_program_week(
    today: date,
    start_date: date,
    total_weeks: int,
    start_week: Optional[int] = 1,
) -> int:
    """
    Logical program week for a local calendar date.

    Args:
        today: Local date in the program timezone.
        start_date: Program start date (local).
        total_weeks: Program length (21 or 18).
        start_week: Week the program was entered at.

    Returns:
        floor(days_since_start / 7) + start_week, clamped to
        [start_week, total_weeks].
    """
    first = clamp_start_week(start_week, total_weeks)
    elapsed_weeks = (today - start_date).days // 7
    return min(max(elapsed_weeks + first, first), total_weeks)


def routine_current_week(routine: Routine, now: datetime, total_weeks: int) -> int:
    """Current week of a routine that has a program."""
    return current_program_week(
        local_date(now, routine.program_timezone),
        routine.program_start_date,
        total_weeks,
        routine.program_start_week,
    )
