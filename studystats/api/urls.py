from django.urls import path
from .views import (
    PracticeProgressDetailView,
    PracticeProgressView,
    PracticeResultsView,
    SessionTimeView,
    StreakMaintenanceView,
    StreakStatusView,
    StudyStatsView,
)

urlpatterns = [
    path("user/session-time", SessionTimeView.as_view(), name="session-time"),
    path("user/study-stats", StudyStatsView.as_view(), name="study-stats"),
    path("user/streak-maintenance", StreakMaintenanceView.as_view(), name="streak-maintenance"),
    path("users/<str:user_id>/streak-status", StreakStatusView.as_view(), name="streak-status"),
    path("users/<str:user_id>/test-results", PracticeResultsView.as_view(), name="test-results"),
    path("users/<str:user_id>/progress", PracticeProgressView.as_view(), name="progress"),
    path(
        "users/<str:user_id>/progress/<int:progress_id>",
        PracticeProgressDetailView.as_view(),
        name="progress-detail",
    ),
]
