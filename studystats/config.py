from django.conf import settings

MIN_SESSION_MINUTES = 1
INACTIVITY_THRESHOLD_SECONDS = 5 * 60
SYNC_INTERVAL_SECONDS = 30
STATS_REFRESH_SECONDS = 30
RECENT_RESULTS_LIMIT = 10
SAVED_PROGRESS_LIMIT = 10  # per user

DEFAULTS = {
    "DAY_TIMEZONE": "UTC",
    "CLOCK_SKEW_POLICY": "same_day",  # or "reject"
}


def get_study_settings() -> dict:
    overrides = getattr(settings, "STUDY_STATS", {}) or {}
    return {**DEFAULTS, **overrides}
