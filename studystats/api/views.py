import uuid

from rest_framework import status, views
from rest_framework.response import Response
import structlog

from accounts.serializers import UserSerializer
from ..services.progress import delete_progress, list_progress, load_progress, save_progress
from ..services.results import record_practice_result, summarize_practice_results
from ..services.sessions import record_session, reset_stale_streaks
from ..services.status import get_streak_status
from .serializers import (
    PracticeProgressSerializer,
    PracticeResultSerializer,
    ProgressLookupSerializer,
    SessionTimeInSerializer,
    StudyStatsInSerializer,
)

base_logger = structlog.get_logger()


def _request_logger():
    return base_logger.bind(request_id=str(uuid.uuid4()))


class SessionTimeView(views.APIView):
    """POST /api/user/session-time: periodic flush from the session tracker."""

    def post(self, request):
        logger = _request_logger()

        s = SessionTimeInSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        user_id = s.validated_data["user_id"]
        minutes = s.validated_data["session_time"]

        stats = record_session(
            user_id,
            minutes,
            client_timestamp=s.validated_data.get("timestamp"),
        )

        logger.info("session_time_api_response",
            user_id=user_id,
            session_time=minutes,
            total_study_time=stats.total_study_time,
            streak=stats.streak,
        )

        return Response(
            {
                "message": "Session time updated successfully",
                "stats": {
                    "total_study_time": stats.total_study_time,
                    "streak": stats.streak,
                    "session_time": minutes,
                },
            }
        )


class StudyStatsView(views.APIView):
    """PUT /api/user/study-stats: study time reported at the end of a practice test."""

    def put(self, request):
        logger = _request_logger()

        s = StudyStatsInSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        user_id = s.validated_data["user_id"]
        stats = record_session(
            user_id,
            s.validated_data["study_time"],
            test_completed=s.validated_data["test_completed"],
        )

        logger.info("study_stats_api_response",
            user_id=user_id,
            test_completed=s.validated_data["test_completed"],
            completed_tests=stats.completed_tests,
        )
        return Response({"user": UserSerializer(stats.user).data})


class StreakMaintenanceView(views.APIView):
    """PUT /api/user/streak-maintenance: daily sweep of broken streaks."""

    def put(self, request):
        updated = reset_stale_streaks()
        return Response(
            {
                "message": f"Streak check completed. {updated} users had their streaks reset.",
                "updated_users": updated,
            }
        )


class StreakStatusView(views.APIView):
    def get(self, request, user_id):
        return Response({"user_id": user_id, **get_streak_status(user_id).as_dict()})


class PracticeResultsView(views.APIView):
    def get(self, request, user_id):
        summary = summarize_practice_results(user_id)
        summary["recent_tests"] = PracticeResultSerializer(
            summary["recent_tests"], many=True
        ).data
        return Response({"user_id": user_id, **summary})

    def post(self, request, user_id):
        s = PracticeResultSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        result = record_practice_result(user_id, **s.validated_data)
        return Response(PracticeResultSerializer(result).data, status=status.HTTP_201_CREATED)


class PracticeProgressView(views.APIView):
    """Saved in-progress practice tests.

    GET without parameters lists unfinished tests, newest first. With
    ``test_type``, ``part`` and ``test_set`` it returns that one test's
    unfinished entry (or null). POST saves the current state of a test.
    """

    def get(self, request, user_id):
        if not request.query_params:
            progress = list_progress(user_id)
            return Response(
                {"user_id": user_id, "progress": PracticeProgressSerializer(progress, many=True).data}
            )

        lookup = ProgressLookupSerializer(data=request.query_params)
        lookup.is_valid(raise_exception=True)
        progress = load_progress(user_id, **lookup.validated_data)
        return Response(
            {
                "user_id": user_id,
                "progress": PracticeProgressSerializer(progress).data if progress else None,
            }
        )

    def post(self, request, user_id):
        s = PracticeProgressSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        progress = save_progress(user_id, **s.validated_data)
        return Response(PracticeProgressSerializer(progress).data)


class PracticeProgressDetailView(views.APIView):
    def delete(self, request, user_id, progress_id):
        delete_progress(user_id, progress_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
