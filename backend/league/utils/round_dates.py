"""
Round play-window dates.

Windows are consecutive blocks of `round_length_days` days. If a window would
end on the 30th of a 31-day month it is stretched to the 31st, and the next
window starts the day after that stretched end, so windows never overlap or
leave gaps.
"""

import calendar
from datetime import date, timedelta
from typing import List, Tuple


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def adjust_period_end(period_end: date) -> date:
    """Stretch an end date on the 30th to the 31st when the month has 31 days."""
    if period_end.day == 30 and days_in_month(period_end.year, period_end.month) == 31:
        return period_end.replace(day=31)
    return period_end


def build_round_windows(start_date: date, round_count: int, round_length_days: int) -> List[Tuple[date, date]]:
    """
    Compute (period_start, period_end) for each round, in order.

    Args:
        start_date: First day of round 1
        round_count: Number of rounds
        round_length_days: Days per round (>= 1)

    Returns:
        List of inclusive (start, end) date pairs; window r+1 starts the day after window r ends
    """
    if round_length_days < 1:
        raise ValueError(f"round_length_days must be >= 1, got {round_length_days}")
    if round_count < 0:
        raise ValueError(f"round_count must be >= 0, got {round_count}")

    windows: List[Tuple[date, date]] = []
    period_start = start_date
    for _ in range(round_count):
        period_end = adjust_period_end(period_start + timedelta(days=round_length_days - 1))
        windows.append((period_start, period_end))
        period_start = period_end + timedelta(days=1)
    return windows
