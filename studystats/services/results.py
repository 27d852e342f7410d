from django.db.models import Max, Sum, Count
import structlog

from ..config import RECENT_RESULTS_LIMIT
from ..data.repos import (
    create_practice_result,
    get_user_by_uid,
    practice_results_for,
    storage_guard,
)

logger = structlog.get_logger()


def _percent(correct, total):
    return round(correct * 100 / total) if total else 0


def record_practice_result(user_id, **fields):
    with storage_guard():
        user = get_user_by_uid(user_id)
        result = create_practice_result(user, **fields)
    logger.info("practice_result_recorded",
        user_id=str(user_id),
        test_type=result.test_type,
        part=result.part,
        score=result.score,
    )
    return result


def summarize_practice_results(user_id):
    """Totals, per-part breakdown and the most recent results for a user."""
    with storage_guard():
        user = get_user_by_uid(user_id)
        qs = practice_results_for(user)

        totals = qs.aggregate(
            tests=Count("id"),
            questions=Sum("total_questions"),
            correct=Sum("correct_answers"),
            time_spent=Sum("time_spent"),
            best_score=Max("score"),
        )
        per_part = (
            qs.order_by()
            .values("part")
            .annotate(
                tests=Count("id"),
                questions=Sum("total_questions"),
                correct=Sum("correct_answers"),
                time_spent=Sum("time_spent"),
                best_score=Max("score"),
            )
            .order_by("part")
        )
        recent = list(qs[:RECENT_RESULTS_LIMIT])

    questions = totals["questions"] or 0
    correct = totals["correct"] or 0
    parts = {}
    for row in per_part:
        parts[row["part"]] = {
            "tests": row["tests"],
            "questions": row["questions"] or 0,
            "correct": row["correct"] or 0,
            "time_spent": row["time_spent"] or 0,
            "average_score": _percent(row["correct"] or 0, row["questions"] or 0),
            "best_score": row["best_score"] or 0,
        }

    return {
        "total_tests": totals["tests"],
        "total_questions": questions,
        "correct_answers": correct,
        "total_time_spent": totals["time_spent"] or 0,
        "average_score": _percent(correct, questions),
        "best_score": totals["best_score"] or 0,
        "part_stats": parts,
        "recent_tests": recent,
    }
