from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from .enums import StreakTransition
from .errors import ClockSkew


@dataclass(frozen=True)
class StreakUpdate:
    streak: int
    start_date: Optional[date]
    transition: StreakTransition
    days_since_last: Optional[int] = None


def next_streak(
    last_day: Optional[date],
    today: date,
    current_streak: int,
    current_start: Optional[date],
    skew_policy: str = "same_day",
) -> StreakUpdate:
    if last_day is None:
        return StreakUpdate(1, today, StreakTransition.FIRST)

    delta = (today - last_day).days

    if delta < 0:
        if skew_policy == "reject":
            raise ClockSkew(f"last study day {last_day} is after {today}")
        # Counted as already credited today
        streak, start = _keep(current_streak, current_start, today)
        return StreakUpdate(streak, start, StreakTransition.CLOCK_SKEW, delta)

    if delta == 0:
        streak, start = _keep(current_streak, current_start, today)
        return StreakUpdate(streak, start, StreakTransition.SAME_DAY, delta)

    if delta == 1:
        if current_streak < 1:
            return StreakUpdate(1, today, StreakTransition.CONTINUED, delta)
        start = current_start or today - timedelta(days=current_streak)
        return StreakUpdate(current_streak + 1, start, StreakTransition.CONTINUED, delta)

    return StreakUpdate(1, today, StreakTransition.BROKEN, delta)


def _keep(current_streak, current_start, today):
    # A zeroed streak with a session today restarts at 1
    if current_streak < 1:
        return 1, today
    return current_streak, current_start or today


def is_stale(last_day: Optional[date], today: date) -> bool:
    """True when a streak ending on ``last_day`` can no longer be continued."""
    return last_day is not None and (today - last_day).days > 1
