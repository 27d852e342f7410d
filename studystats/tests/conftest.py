import pytest

from accounts.services import upsert_user
from studystats.data.models import StudyStats
from studystats.utils.time import StudyDayPolicy


@pytest.fixture
def utc_policy():
    return StudyDayPolicy("UTC")


@pytest.fixture
def make_user(db):
    def _make(uid="learner-1", email=None, **stats):
        user, _ = upsert_user(uid, email or f"{uid}@example.com", display_name=uid)
        if stats:
            StudyStats.objects.filter(user=user).update(**stats)
        return user
    return _make
