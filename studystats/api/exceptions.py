from rest_framework.response import Response
from rest_framework.views import exception_handler
import structlog

from ..domain.errors import StudyStatsError

logger = structlog.get_logger()


def study_stats_exception_handler(exc, context):
    if isinstance(exc, StudyStatsError):
        view = context.get("view")
        logger.warning("study_stats_error",
            code=exc.code,
            detail=exc.detail,
            view=type(view).__name__ if view else None,
        )
        return Response({"error": exc.code, "detail": exc.detail}, status=exc.status_code)
    return exception_handler(exc, context)
