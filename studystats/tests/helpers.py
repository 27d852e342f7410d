from datetime import datetime, timezone

from studystats.data.models import StudyStats


def at(y, m, d, hh=9, mm=0):
    return datetime(y, m, d, hh, mm, tzinfo=timezone.utc)


def stats_of(user):
    return StudyStats.objects.get(user=user)
