from datetime import timedelta

from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError, transaction
from django.utils import timezone
import structlog

from ..config import MIN_SESSION_MINUTES, get_study_settings
from ..data.repos import (
    apply_session,
    clear_streak,
    get_or_create_stats_for_update,
    get_user_by_uid,
    lock_stats,
    stale_streak_candidates,
    storage_guard,
    zero_stats,
)
from ..domain.enums import StreakTransition
from ..domain.errors import InvalidSession
from ..domain.streak import is_stale, next_streak
from ..utils.time import StudyDayPolicy, to_local_iso

logger = structlog.get_logger()


def record_session(user_id, minutes, test_completed=False, client_timestamp=None,
                   now=None, policy=None):
    """Add ``minutes`` of study to a user and recompute the streak.

    The stats row is locked for the whole read-modify-write so two concurrent
    calls for the same user cannot lose an update or read a stale
    ``last_study_date``.
    """
    if minutes is None or int(minutes) < MIN_SESSION_MINUTES:
        logger.info("session_rejected", user_id=str(user_id), minutes=minutes)
        raise InvalidSession(f"session_time must be >= {MIN_SESSION_MINUTES} minute")
    minutes = int(minutes)

    now = now or timezone.now()
    policy = policy or StudyDayPolicy.from_settings()
    skew_policy = get_study_settings()["CLOCK_SKEW_POLICY"]

    with storage_guard():
        user = get_user_by_uid(user_id)
        with transaction.atomic():
            stats = get_or_create_stats_for_update(user)

            today = policy.day_of(now)
            last_day = policy.day_of(stats.last_study_date) if stats.last_study_date else None
            update = next_streak(
                last_day, today, stats.streak, stats.streak_start_date, skew_policy
            )

            if update.transition == StreakTransition.CLOCK_SKEW:
                logger.warning("clock_skew_detected",
                    user_id=str(user_id),
                    last_study_day=str(last_day),
                    today=str(today),
                )
            elif update.transition == StreakTransition.BROKEN:
                logger.info("streak_broken",
                    user_id=str(user_id),
                    previous_streak=stats.streak,
                    days_missed=update.days_since_last,
                )

            stats = apply_session(
                stats,
                minutes,
                now,
                update.streak,
                update.start_date,
                test_completed,
                client_timestamp,
            )

    logger.info("session_recorded",
        user_id=str(user_id),
        minutes=minutes,
        test_completed=test_completed,
        transition=update.transition.value,
        streak=stats.streak,
        total_study_time=stats.total_study_time,
        last_study_utc=stats.last_study_date.isoformat(),
        last_study_local=to_local_iso(stats.last_study_date, policy),
    )
    return stats


def reset_stale_streaks(now=None, policy=None):
    """Zero every active streak whose last study day is before yesterday.

    Each user is reset in its own transaction; a failure on one user is
    logged and the sweep moves on.
    """
    now = now or timezone.now()
    policy = policy or StudyDayPolicy.from_settings()
    today = policy.day_of(now)
    cutoff = policy.start_of_day(today - timedelta(days=1))

    with storage_guard():
        candidates = stale_streak_candidates(cutoff)

    updated = 0
    for pk in candidates:
        try:
            with transaction.atomic():
                stats = lock_stats(pk)
                last_day = policy.day_of(stats.last_study_date) if stats.last_study_date else None
                # Re-checked under the lock; a session may have landed meanwhile
                if stats.streak == 0 or not is_stale(last_day, today):
                    continue
                clear_streak(stats, now)
        except (DatabaseError, ObjectDoesNotExist) as exc:
            logger.error("streak_reset_failed", stats_id=pk, error=str(exc))
            continue

        updated += 1
        logger.info("streak_reset",
            user_id=str(stats.user_id),
            previous_streak=stats.streak,
            days_missed=(today - last_day).days,
        )

    logger.info("streak_maintenance_done", candidates=len(candidates), updated_users=updated)
    return updated


def reset_study_stats(user_id):
    """Admin reset: the only path that lowers total_study_time."""
    with storage_guard():
        user = get_user_by_uid(user_id)
        stats = zero_stats(user)
    logger.warning("study_stats_reset", user_id=str(user_id))
    return stats
