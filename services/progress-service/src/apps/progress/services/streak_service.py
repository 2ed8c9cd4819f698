# services/progress-service/src/apps/progress/services/streak_service.py
"""
Streak Service

Consecutive-day activity streaks from lesson completion dates.
"""

from datetime import date, datetime
from typing import Iterable, Union


def _calendar_day(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def compute_streak(dates: Iterable[Union[date, datetime]]) -> int:
    """
    Longest run of consecutive calendar days.

    Several completions on the same day count once. Input order does
    not matter.

    Args:
        dates: Completion dates or datetimes

    Returns:
        Length of the longest run, 0 for no dates
    """
    days = sorted({_calendar_day(d) for d in dates}, reverse=True)
    if not days:
        return 0

    longest = current = 1
    for newer, older in zip(days, days[1:]):
        if (newer - older).days == 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1

    return longest
