import asyncio

import structlog

from ..config import STATS_REFRESH_SECONDS
from .transport import SyncError

logger = structlog.get_logger()


class StatsRefresher:
    """Pull-based dashboard view of a user's stored stats.

    The view is eventually consistent: it lags the server by at most one
    refresh interval, and the tracker's unreported minutes are added on top
    for display.
    """

    def __init__(self, api, user_id, interval=STATS_REFRESH_SECONDS):
        self.api = api
        self.user_id = user_id
        self.interval = interval
        self.total_study_time = 0
        self.streak = 0
        self._task = None

    def refresh(self):
        """Blocking fetch; the background loop uses ``refresh_async``."""
        try:
            user = self.api.fetch_user(self.user_id)
        except SyncError as exc:
            logger.debug("stats_refresh_failed", user_id=self.user_id, error=str(exc))
            return False
        self._apply(user)
        return True

    async def refresh_async(self):
        try:
            user = await asyncio.to_thread(self.api.fetch_user, self.user_id)
        except SyncError as exc:
            logger.debug("stats_refresh_failed", user_id=self.user_id, error=str(exc))
            return False
        self._apply(user)
        return True

    def _apply(self, user):
        stats = (user or {}).get("study_stats") or {}
        self.total_study_time = stats.get("total_study_time", 0)
        self.streak = stats.get("streak", 0)

    def displayed_total(self, tracker=None):
        pending = tracker.current_session_minutes() if tracker else 0
        return self.total_study_time + pending

    def start(self):
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())
        return self._task

    def cancel(self):
        if self._task is not None:
            self._task.cancel()

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self):
        while True:
            await self.refresh_async()
            await asyncio.sleep(self.interval)
