class StudyStatsError(Exception):
    code = "study_stats_error"
    status_code = 400
    default_detail = "Study stats request failed."

    def __init__(self, detail=None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidSession(StudyStatsError):
    code = "invalid_session"
    default_detail = "Session must last at least one minute."


class UserNotFound(StudyStatsError):
    code = "user_not_found"
    status_code = 404
    default_detail = "User not found."


class ClockSkew(StudyStatsError):
    code = "clock_skew"
    status_code = 409
    default_detail = "Last study date is later than today."


class StorageUnavailable(StudyStatsError):
    code = "storage_unavailable"
    status_code = 503
    default_detail = "Stats storage is unavailable."


class ProgressNotFound(StudyStatsError):
    code = "progress_not_found"
    status_code = 404
    default_detail = "Saved progress not found."
