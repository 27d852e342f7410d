from enum import Enum


class StreakTransition(str, Enum):
    FIRST = "first"
    SAME_DAY = "same_day"
    CONTINUED = "continued"
    BROKEN = "broken"
    CLOCK_SKEW = "clock_skew"


class PracticeType(str, Enum):
    PART5 = "part5"
    PART6 = "part6"
    PART7 = "part7"
    FULL_TEST = "full-test"


class Skill(str, Enum):
    READING = "reading"
    LISTENING = "listening"


STREAK_TIPS = {
    "start": "Study at least 1 minute a day to start a streak.",
    "done_today": "You studied today. Keep it going tomorrow.",
    "keep_alive": "Study at least 1 minute today to keep your streak.",
}
