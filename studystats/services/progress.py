from django.utils import timezone
import structlog

from ..config import SAVED_PROGRESS_LIMIT
from ..data.repos import (
    delete_progress_row,
    get_user_by_uid,
    storage_guard,
    unfinished_progress_for,
    upsert_progress,
)
from ..domain.errors import ProgressNotFound

logger = structlog.get_logger()


def save_progress(user_id, test_type, part, test_set, now=None, **fields):
    """Save (or overwrite) the in-progress state of one practice test.

    A user keeps at most ``SAVED_PROGRESS_LIMIT`` entries; the least recently
    saved ones are dropped.
    """
    now = now or timezone.now()
    with storage_guard():
        user = get_user_by_uid(user_id)
        progress, pruned = upsert_progress(
            user, test_type, part, test_set, now, SAVED_PROGRESS_LIMIT, **fields
        )
    logger.info("progress_saved",
        user_id=str(user_id),
        test_type=test_type,
        part=part,
        test_set=test_set,
        current_question=progress.current_question,
        completed=progress.completed,
        pruned=pruned,
    )
    return progress


def load_progress(user_id, test_type, part, test_set):
    """The unfinished entry for one test, or None."""
    with storage_guard():
        user = get_user_by_uid(user_id)
        return unfinished_progress_for(user).filter(
            test_type=test_type, part=part, test_set=test_set
        ).first()


def list_progress(user_id):
    with storage_guard():
        user = get_user_by_uid(user_id)
        return list(unfinished_progress_for(user))


def delete_progress(user_id, progress_id):
    with storage_guard():
        user = get_user_by_uid(user_id)
        if not delete_progress_row(user, progress_id):
            raise ProgressNotFound(f"progress {progress_id} not found for user {user_id}")
    logger.info("progress_deleted", user_id=str(user_id), progress_id=progress_id)
