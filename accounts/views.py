from django.core.management import call_command
from django.db import connection
from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response
import structlog

from studystats.data.models import PracticeProgress, PracticeResult, StudySession, StudyStats
from studystats.data.repos import storage_guard
from .inspection import QueryInSerializer, overview, run_query
from .models import LoginEvent, User
from .permissions import IsStudyAdmin
from .serializers import UserSerializer, UserUpsertSerializer
from .services import find_user, upsert_user

logger = structlog.get_logger()

MAX_SEED_USERS = 100


@api_view(["GET", "POST"])
def user_record(request):
    """GET /api/user?uid=... reads a user; POST upserts one on sign-in."""
    if request.method == "GET":
        uid = request.query_params.get("uid")
        if not uid:
            return Response({"error": "UID is required"}, status=status.HTTP_400_BAD_REQUEST)
        user = find_user(uid)
        return Response({"user": UserSerializer(user).data if user else None})

    s = UserUpsertSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user, created = upsert_user(
        ip=request.headers.get("X-Forwarded-For", "unknown"),
        **s.validated_data,
    )
    return Response(
        {"user": UserSerializer(user).data},
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )


@api_view(["GET"])
def test_connection(request):
    """Database inspection: backend vendor and row counts."""
    with storage_guard():
        counts = {
            "users": User.objects.count(),
            "login_events": LoginEvent.objects.count(),
            "study_stats": StudyStats.objects.count(),
            "study_sessions": StudySession.objects.count(),
            "practice_results": PracticeResult.objects.count(),
            "test_progress": PracticeProgress.objects.count(),
        }
    logger.info("test_connection", database=connection.vendor, **counts)
    return Response(
        {
            "status": "success",
            "database": connection.vendor,
            "tables": sorted(counts),
            "counts": counts,
        }
    )


@api_view(["POST"])
@permission_classes([IsStudyAdmin])
def initialize_data(request):
    """Adds demo learners. Never deletes users and never creates an admin."""
    try:
        count = int(request.data.get("users", 5))
        if not 0 <= count <= MAX_SEED_USERS:
            raise ValueError(f"users must be between 0 and {MAX_SEED_USERS}")
        call_command("init_data", users=count, no_admin=True)
        logger.info("demo_data_seeded", users=count, requested_by=request.user.uid)
        return Response(
            {"message": f"Demo data initialized with {count} users"},
            status=status.HTTP_200_OK,
        )
    except (TypeError, ValueError) as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


class UserViewSet(viewsets.ViewSet):
    """
    ViewSet for user-related operations.
    """

    @action(detail=False, methods=["get"])
    def me(self, request):
        """
        Returns the uid of the signed-in user.
        """
        if request.user and request.user.is_authenticated:
            return Response({"uid": request.user.uid}, status=status.HTTP_200_OK)
        else:
            return Response(
                {"error": "User not authenticated"}, status=status.HTTP_401_UNAUTHORIZED
            )


@api_view(["GET", "POST"])
@permission_classes([IsStudyAdmin])
def data_inspection(request):
    """GET: counts and samples of every collection. POST: filtered read of one."""
    if request.method == "GET":
        data = overview()
        logger.info("data_inspected", requested_by=request.user.uid)
        return Response(
            {
                "database": connection.vendor,
                "collections": list(data),
                "total_collections": len(data),
                "data": data,
            }
        )

    s = QueryInSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    total, documents = run_query(**s.validated_data)
    logger.info("data_queried",
        requested_by=request.user.uid,
        collection=s.validated_data["collection"],
        filters=sorted(s.validated_data["query"]),
        total=total,
    )
    return Response(
        {
            "collection": s.validated_data["collection"],
            "query": s.validated_data["query"],
            "total_documents": total,
            "documents": documents,
        }
    )
