from dataclasses import dataclass, asdict
from typing import Optional

from django.utils import timezone

from ..data.repos import get_stats, get_user_by_uid, storage_guard
from ..domain.enums import STREAK_TIPS
from ..utils.time import StudyDayPolicy, format_minutes


@dataclass
class StreakStatus:
    streak: int
    studied_today: bool
    at_risk: bool
    days_since_last_study: Optional[int]
    minutes_until_reset: Optional[int]
    tip: str

    def as_dict(self):
        data = asdict(self)
        if self.minutes_until_reset is not None:
            data["time_until_reset"] = format_minutes(self.minutes_until_reset)
        return data


def evaluate_streak(streak, last_study_date, now, policy):
    """Decide what the streak notification should say.

    A streak is at risk when it is active and nothing was studied today.
    When today is already credited, the time left before the next day
    boundary is reported instead.
    """
    if last_study_date is None:
        return StreakStatus(streak, False, False, None, None, STREAK_TIPS["start"])

    days = (policy.day_of(now) - policy.day_of(last_study_date)).days
    studied_today = days <= 0
    at_risk = streak > 0 and days >= 1

    minutes_left = None
    if studied_today and streak > 0:
        remaining = policy.next_day_start(now) - now
        minutes_left = max(0, int(remaining.total_seconds() // 60))

    if streak == 0:
        tip = STREAK_TIPS["start"]
    elif studied_today:
        tip = STREAK_TIPS["done_today"]
    else:
        tip = STREAK_TIPS["keep_alive"]

    return StreakStatus(streak, studied_today, at_risk, max(days, 0), minutes_left, tip)


def get_streak_status(user_id, now=None, policy=None):
    now = now or timezone.now()
    policy = policy or StudyDayPolicy.from_settings()
    with storage_guard():
        stats = get_stats(get_user_by_uid(user_id))
    return evaluate_streak(stats.streak, stats.last_study_date, now, policy)
