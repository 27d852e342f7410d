from .data.models import PracticeProgress, PracticeResult, StudySession, StudyStats  # noqa: F401
