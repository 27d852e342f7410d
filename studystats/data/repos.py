from contextlib import contextmanager

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from ..domain.errors import StorageUnavailable, UserNotFound
from .models import PracticeProgress, PracticeResult, StudySession, StudyStats


@contextmanager
def storage_guard():
    """Re-raise database failures as StorageUnavailable."""
    try:
        yield
    except IntegrityError:
        raise
    except DatabaseError as exc:
        raise StorageUnavailable(str(exc)) from exc


def get_user_by_uid(uid):
    User = get_user_model()
    try:
        return User.objects.get(uid=uid)
    except User.DoesNotExist:
        raise UserNotFound(f"user {uid} not found")


def get_or_create_stats_for_update(user):
    """
    Fetch the stats row and lock it for the rest of the caller's transaction.
    Create a zeroed row if missing. Must run inside transaction.atomic().
    """
    try:
        return StudyStats.objects.select_for_update().get(user=user)
    except StudyStats.DoesNotExist:
        StudyStats.objects.get_or_create(user=user)
        return StudyStats.objects.select_for_update().get(user=user)


def apply_session(stats, minutes, now, streak, streak_start_date, test_completed, client_timestamp):
    """Field-level update of a locked stats row plus the session log entry."""
    changes = {
        "total_study_time": F("total_study_time") + minutes,
        "last_study_date": now,
        "streak": streak,
        "streak_start_date": streak_start_date,
        "updated_at": now,
    }
    if test_completed:
        changes["completed_tests"] = F("completed_tests") + 1
    StudyStats.objects.filter(pk=stats.pk).update(**changes)

    StudySession.objects.create(
        stats=stats,
        date=now,
        duration_minutes=minutes,
        client_timestamp=client_timestamp,
        test_completed=test_completed,
    )
    stats.refresh_from_db()
    return stats


def stale_streak_candidates(before):
    """Ids of stats rows with an active streak last touched before ``before``."""
    return list(
        StudyStats.objects.filter(streak__gt=0, last_study_date__lt=before)
        .order_by("pk")
        .values_list("pk", flat=True)
    )


def lock_stats(pk):
    return StudyStats.objects.select_for_update().get(pk=pk)


def clear_streak(stats, now):
    StudyStats.objects.filter(pk=stats.pk).update(
        streak=0, streak_start_date=None, updated_at=now
    )


def zero_stats(user):
    with transaction.atomic():
        stats = get_or_create_stats_for_update(user)
        StudyStats.objects.filter(pk=stats.pk).update(
            total_study_time=0,
            streak=0,
            streak_start_date=None,
            last_study_date=None,
            completed_tests=0,
            updated_at=timezone.now(),
        )
        stats.refresh_from_db()
        return stats


def create_practice_result(user, **fields):
    return PracticeResult.objects.create(user=user, **fields)


def practice_results_for(user):
    return PracticeResult.objects.filter(user=user)


def get_stats(user):
    """Read-only view of a user's stats; zeroed when no row exists yet."""
    return StudyStats.objects.filter(user=user).first() or StudyStats(user=user)


def upsert_progress(user, test_type, part, test_set, now, keep, **fields):
    """Replace the saved entry for one test and prune the user's oldest beyond ``keep``."""
    with transaction.atomic():
        progress, _ = PracticeProgress.objects.update_or_create(
            user=user,
            test_type=test_type,
            part=part,
            test_set=test_set,
            defaults={**fields, "last_saved": now},
        )
        stale = list(
            PracticeProgress.objects.filter(user=user)
            .order_by("-last_saved", "-id")
            .values_list("pk", flat=True)[keep:]
        )
        if stale:
            PracticeProgress.objects.filter(pk__in=stale).delete()
    return progress, len(stale)


def unfinished_progress_for(user):
    return PracticeProgress.objects.filter(user=user, completed=False).order_by("-last_saved", "-id")


def delete_progress_row(user, progress_id):
    deleted, _ = PracticeProgress.objects.filter(user=user, pk=progress_id).delete()
    return deleted
