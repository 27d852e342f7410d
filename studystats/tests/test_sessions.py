import logging
import threading
from datetime import date

import pytest
from django.db import OperationalError, connection

from studystats.data.models import StudySession
from studystats.domain.errors import ClockSkew, InvalidSession, StorageUnavailable, UserNotFound
from studystats.services import sessions
from studystats.services.sessions import record_session, reset_stale_streaks, reset_study_stats
from studystats.utils.time import StudyDayPolicy
from .helpers import at, stats_of

logger = logging.getLogger(__name__)


@pytest.mark.django_db
@pytest.mark.parametrize("minutes", [0, -3])
def test_sub_minute_session_is_rejected_and_changes_nothing(make_user, utc_policy, minutes):
    user = make_user(total_study_time=40, streak=2, streak_start_date=date(2024, 1, 9),
                     last_study_date=at(2024, 1, 10))

    with pytest.raises(InvalidSession):
        record_session(user.uid, minutes, now=at(2024, 1, 11), policy=utc_policy)

    s = stats_of(user)
    assert (s.total_study_time, s.streak) == (40, 2)
    assert s.last_study_date == at(2024, 1, 10)
    assert not StudySession.objects.filter(stats=s).exists()


@pytest.mark.django_db
def test_unknown_user(utc_policy):
    with pytest.raises(UserNotFound):
        record_session("nobody", 5, now=at(2024, 1, 11), policy=utc_policy)


@pytest.mark.django_db
def test_first_ever_session(make_user, utc_policy):
    user = make_user()
    s = record_session(user.uid, 3, now=at(2024, 1, 10), policy=utc_policy)

    assert s.streak == 1
    assert s.streak_start_date == date(2024, 1, 10)
    assert s.total_study_time == 3
    assert s.last_study_date == at(2024, 1, 10)


@pytest.mark.django_db
def test_same_day_sessions_do_not_move_streak(make_user, utc_policy):
    """Repeated sessions on one day keep the streak it had before the first one."""
    user = make_user(streak=4, streak_start_date=date(2024, 1, 7),
                     last_study_date=at(2024, 1, 10, 8))

    for hh, m in [(9, 2), (13, 5), (22, 1)]:
        s = record_session(user.uid, m, now=at(2024, 1, 10, hh), policy=utc_policy)
        assert s.streak == 4
        assert s.streak_start_date == date(2024, 1, 7)

    assert s.total_study_time == 8
    logger.info("✓ Passed: same-day sessions kept streak=%s", s.streak)


@pytest.mark.django_db
def test_next_day_scenario(make_user, utc_policy):
    user = make_user(total_study_time=100, streak=5, streak_start_date=date(2024, 1, 6),
                     last_study_date=at(2024, 1, 10, 20))

    s = record_session(user.uid, 10, False, now=at(2024, 1, 11, 7), policy=utc_policy)

    assert s.streak == 6
    assert s.streak_start_date == date(2024, 1, 6)
    assert s.total_study_time == 110
    assert s.last_study_date == at(2024, 1, 11, 7)


@pytest.mark.django_db
def test_gap_scenario(make_user, utc_policy):
    user = make_user(total_study_time=100, streak=5, streak_start_date=date(2024, 1, 6),
                     last_study_date=at(2024, 1, 10, 20))

    s = record_session(user.uid, 10, False, now=at(2024, 1, 15), policy=utc_policy)

    assert s.streak == 1
    assert s.streak_start_date == date(2024, 1, 15)
    assert s.total_study_time == 110


@pytest.mark.django_db
def test_total_is_pure_accumulation(make_user, utc_policy):
    user = make_user(total_study_time=17)
    minutes = [1, 4, 30, 2, 9]
    days = [10, 10, 11, 14, 14]
    for m, d in zip(minutes, days):
        s = record_session(user.uid, m, now=at(2024, 1, d), policy=utc_policy)

    assert s.total_study_time == 17 + sum(minutes)
    assert StudySession.objects.filter(stats=s).count() == len(minutes)


@pytest.mark.django_db
def test_test_completed_counts_and_logs_session(make_user, utc_policy):
    user = make_user()
    s = record_session(user.uid, 25, test_completed=True, client_timestamp=at(2024, 1, 10, 8, 59),
                       now=at(2024, 1, 10), policy=utc_policy)

    assert s.completed_tests == 1
    entry = StudySession.objects.get(stats=s)
    assert entry.duration_minutes == 25
    assert entry.test_completed is True
    assert entry.client_timestamp == at(2024, 1, 10, 8, 59)


@pytest.mark.django_db
def test_day_boundary_follows_policy(make_user):
    """23:30 UTC on the 10th is already the 11th in Tokyo."""
    user = make_user(streak=2, streak_start_date=date(2024, 1, 9), last_study_date=at(2024, 1, 10, 1))

    s = record_session(user.uid, 5, now=at(2024, 1, 10, 23, 30), policy=StudyDayPolicy("Asia/Tokyo"))
    assert s.streak == 3


@pytest.mark.django_db
def test_clock_skew_same_day_policy(make_user, utc_policy):
    user = make_user(streak=3, streak_start_date=date(2024, 1, 10), last_study_date=at(2024, 1, 12))

    s = record_session(user.uid, 5, now=at(2024, 1, 11), policy=utc_policy)
    assert s.streak == 3
    assert s.total_study_time == 5


@pytest.mark.django_db
def test_clock_skew_reject_policy(make_user, utc_policy, settings):
    settings.STUDY_STATS = {"CLOCK_SKEW_POLICY": "reject"}
    user = make_user(streak=3, streak_start_date=date(2024, 1, 10), last_study_date=at(2024, 1, 12))

    with pytest.raises(ClockSkew):
        record_session(user.uid, 5, now=at(2024, 1, 11), policy=utc_policy)
    assert stats_of(user).total_study_time == 0


@pytest.mark.django_db
def test_storage_failure_is_reported(make_user, utc_policy, monkeypatch):
    user = make_user()

    def broken(uid):
        raise OperationalError("database is locked")

    monkeypatch.setattr(sessions, "get_user_by_uid", broken)
    with pytest.raises(StorageUnavailable):
        record_session(user.uid, 5, now=at(2024, 1, 10), policy=utc_policy)


@pytest.mark.django_db
def test_missing_stats_row_is_created(make_user, utc_policy):
    user = make_user()
    stats_of(user).delete()

    s = record_session(user.uid, 2, now=at(2024, 1, 10), policy=utc_policy)
    assert (s.total_study_time, s.streak) == (2, 1)


@pytest.mark.django_db
def test_interleaved_sessions_do_not_lose_minutes(make_user, utc_policy, monkeypatch):
    user = make_user(total_study_time=100, streak=5, streak_start_date=date(2024, 1, 6),
                     last_study_date=at(2024, 1, 10))
    real_get = sessions.get_or_create_stats_for_update
    interleaved = []
    calls = []

    def get_then_interleave(u):
        stats = real_get(u)
        calls.append(u)
        if len(calls) == 1:
            # Another sync lands after this call has read its snapshot
            interleaved.append(record_session(user.uid, 7, now=at(2024, 1, 11, 9, 1), policy=utc_policy))
        return stats

    monkeypatch.setattr(sessions, "get_or_create_stats_for_update", get_then_interleave)
    s = record_session(user.uid, 3, now=at(2024, 1, 11), policy=utc_policy)

    assert interleaved[0].total_study_time == 107
    assert s.total_study_time == 110
    assert s.streak == 6
    assert StudySession.objects.filter(stats=s).count() == 2


@pytest.mark.django_db(transaction=True)
@pytest.mark.skipif(
    not connection.features.has_select_for_update,
    reason="row locks need a database with SELECT ... FOR UPDATE",
)
def test_concurrent_sessions_add_up(make_user, utc_policy):
    user = make_user(total_study_time=10)
    barrier = threading.Barrier(2)
    errors = []

    def sync(minutes):
        try:
            barrier.wait()
            record_session(user.uid, minutes, now=at(2024, 1, 11), policy=utc_policy)
        except Exception as exc:  # surfaced below
            errors.append(exc)
        finally:
            connection.close()

    threads = [threading.Thread(target=sync, args=(m,)) for m in (4, 6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert stats_of(user).total_study_time == 20


# Maintenance sweep

@pytest.mark.django_db
def test_sweep_with_nothing_stale(make_user, utc_policy):
    make_user("today", streak=2, streak_start_date=date(2024, 1, 10), last_study_date=at(2024, 1, 11))
    make_user("yesterday", streak=2, streak_start_date=date(2024, 1, 9), last_study_date=at(2024, 1, 10, 1))
    make_user("never")

    assert reset_stale_streaks(now=at(2024, 1, 11, 12), policy=utc_policy) == 0


@pytest.mark.django_db
def test_sweep_resets_only_broken_streaks(make_user, utc_policy):
    stale = make_user("stale", streak=7, streak_start_date=date(2024, 1, 1), last_study_date=at(2024, 1, 8))
    fresh = make_user("fresh", streak=2, streak_start_date=date(2024, 1, 10), last_study_date=at(2024, 1, 10, 23))

    assert reset_stale_streaks(now=at(2024, 1, 11, 12), policy=utc_policy) == 1

    s = stats_of(stale)
    assert (s.streak, s.streak_start_date) == (0, None)
    assert s.last_study_date == at(2024, 1, 8)
    assert stats_of(fresh).streak == 2

    # Idempotent within the day
    assert reset_stale_streaks(now=at(2024, 1, 11, 18), policy=utc_policy) == 0


@pytest.mark.django_db
def test_sweep_continues_past_a_failing_user(make_user, utc_policy, monkeypatch):
    users = [
        make_user(f"stale-{i}", streak=3, streak_start_date=date(2024, 1, 1), last_study_date=at(2024, 1, 3))
        for i in range(3)
    ]
    failing_pk = stats_of(users[1]).pk
    real_lock = sessions.lock_stats

    def flaky_lock(pk):
        if pk == failing_pk:
            raise OperationalError("database is locked")
        return real_lock(pk)

    monkeypatch.setattr(sessions, "lock_stats", flaky_lock)

    assert reset_stale_streaks(now=at(2024, 1, 11), policy=utc_policy) == 2
    assert [stats_of(u).streak for u in users] == [0, 3, 0]

    # The next run picks up the user that failed
    monkeypatch.setattr(sessions, "lock_stats", real_lock)
    assert reset_stale_streaks(now=at(2024, 1, 11, 1), policy=utc_policy) == 1
    assert stats_of(users[1]).streak == 0


@pytest.mark.django_db
def test_session_after_sweep_restarts_streak(make_user, utc_policy):
    user = make_user(streak=7, streak_start_date=date(2024, 1, 1), last_study_date=at(2024, 1, 8))
    reset_stale_streaks(now=at(2024, 1, 11), policy=utc_policy)

    s = record_session(user.uid, 5, now=at(2024, 1, 11, 10), policy=utc_policy)
    assert (s.streak, s.streak_start_date) == (1, date(2024, 1, 11))


@pytest.mark.django_db
def test_admin_reset(make_user):
    user = make_user(total_study_time=300, streak=4, streak_start_date=date(2024, 1, 7),
                     last_study_date=at(2024, 1, 10), completed_tests=3)

    s = reset_study_stats(user.uid)
    assert (s.total_study_time, s.streak, s.completed_tests) == (0, 0, 0)
    assert s.streak_start_date is None and s.last_study_date is None
