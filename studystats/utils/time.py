from datetime import date, datetime, timedelta, timezone as dt_tz

import pytz

from ..config import get_study_settings


class StudyDayPolicy:
    """Decides which calendar day a timestamp belongs to.

    Streaks compare whole days, so the boundary between two days has to be
    fixed explicitly instead of depending on the host's local time.
    """

    def __init__(self, tz_name: str = "UTC"):
        self.tz_name = tz_name
        self.tz = pytz.timezone(tz_name)

    @classmethod
    def from_settings(cls) -> "StudyDayPolicy":
        return cls(get_study_settings()["DAY_TIMEZONE"])

    def day_of(self, moment: datetime) -> date:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=dt_tz.utc)
        return moment.astimezone(self.tz).date()

    def start_of_day(self, day: date) -> datetime:
        return self.tz.localize(datetime(day.year, day.month, day.day))

    def next_day_start(self, moment: datetime) -> datetime:
        return self.start_of_day(self.day_of(moment) + timedelta(days=1))


def to_local_iso(dt_utc, policy: StudyDayPolicy):
    return dt_utc.astimezone(policy.tz).isoformat()


def format_minutes(minutes: int) -> str:
    hours, mins = divmod(int(minutes), 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"
