from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Union

Timestamp = Union[datetime, date]


def _distinct_days(timestamps: Iterable[Timestamp], today: date) -> List[date]:
    days = {ts.date() if isinstance(ts, datetime) else ts for ts in timestamps}
    return sorted((day for day in days if day <= today), reverse=True)


def compute_streak(timestamps: Iterable[Timestamp], today: Optional[date] = None) -> int:
    """Count consecutive study days ending today or yesterday.

    Only the calendar day of each timestamp matters. Days after ``today``
    are ignored. A most recent day older than yesterday means the streak
    is broken and 0 is returned.
    """
    today = today or date.today()
    days = _distinct_days(timestamps, today)
    if not days or (today - days[0]).days > 1:
        return 0

    streak = 1
    for previous, current in zip(days, days[1:]):
        if (previous - current).days != 1:
            break
        streak += 1
    return streak


def longest_streak(timestamps: Iterable[Timestamp], today: Optional[date] = None) -> int:
    today = today or date.today()
    days = _distinct_days(timestamps, today)
    if not days:
        return 0

    longest = current = 1
    for previous, day in zip(days, days[1:]):
        current = current + 1 if previous - day == timedelta(days=1) else 1
        longest = max(longest, current)
    return longest
