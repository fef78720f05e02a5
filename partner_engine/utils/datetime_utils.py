"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def month_bounds(moment: datetime, months_back: int = 0) -> tuple[datetime, datetime]:
    """
    Get [start, end) of a calendar month.

    Args:
        moment: Reference datetime
        months_back: 0 for the month of moment, 1 for the previous, ...

    Returns:
        Tuple of (month start, next month start) in moment's timezone
    """
    month_index = moment.year * 12 + (moment.month - 1) - months_back
    year, month = divmod(month_index, 12)
    start = moment.replace(
        year=year, month=month + 1, day=1,
        hour=0, minute=0, second=0, microsecond=0,
    )
    next_year, next_month = divmod(month_index + 1, 12)
    end = start.replace(year=next_year, month=next_month + 1)
    return start, end
