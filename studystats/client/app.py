import structlog

from ..config import STATS_REFRESH_SECONDS, SYNC_INTERVAL_SECONDS
from .refresher import StatsRefresher
from .tracker import SessionTracker, TrackerLoop, utc_now

logger = structlog.get_logger()


class StudyClient:
    """Owns the per-login tracker and stats view.

    Both are built on ``login`` and torn down on ``logout`` so that every
    signed-in user gets a fresh tracker.
    """

    def __init__(self, api, clock=utc_now, sync_interval=SYNC_INTERVAL_SECONDS,
                 refresh_interval=STATS_REFRESH_SECONDS):
        self.api = api
        self.clock = clock
        self.sync_interval = sync_interval
        self.refresh_interval = refresh_interval
        self.tracker = None
        self.refresher = None
        self._loop = None

    def _sync(self, user_id, minutes, timestamp):
        self.api.post_session_time(user_id, minutes, timestamp)

    def login(self, user_id, run_loops=False):
        if self.tracker is not None:
            self.logout()
        self.tracker = SessionTracker(self._sync, clock=self.clock)
        self.refresher = StatsRefresher(self.api, user_id, interval=self.refresh_interval)
        self.tracker.start_session(user_id)
        if run_loops:
            # The refresher loop fetches first thing, off the event loop
            self._loop = TrackerLoop(self.tracker, interval=self.sync_interval)
            self._loop.start()
            self.refresher.start()
        else:
            self.refresher.refresh()
        logger.info("study_client_login", user_id=user_id)
        return self.tracker

    def logout(self):
        """Best-effort flush; background loops are cancelled without waiting."""
        if self.tracker is None:
            return
        user_id = self.tracker.user_id
        self.tracker.end_session()
        if self._loop is not None:
            self._loop.cancel()
        self.refresher.cancel()
        self.tracker = None
        self.refresher = None
        self._loop = None
        logger.info("study_client_logout", user_id=user_id)

    def dashboard(self):
        if self.tracker is None:
            return None
        return {
            "total_study_time": self.refresher.displayed_total(self.tracker),
            "streak": self.refresher.streak,
            "current_session": self.tracker.current_session_minutes(),
            "active": self.tracker.is_active,
        }
