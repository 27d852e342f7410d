import asyncio
import functools
from datetime import datetime, timezone
from enum import Enum

import structlog

from ..config import INACTIVITY_THRESHOLD_SECONDS, MIN_SESSION_MINUTES, SYNC_INTERVAL_SECONDS
from .transport import SyncError

logger = structlog.get_logger()


def utc_now():
    return datetime.now(timezone.utc)


class TrackerState(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    IDLE = "idle"


class SessionTracker:
    """Turns user interaction into periodic "minutes studied" reports.

    ``sync`` is a blocking call ``sync(user_id, minutes, timestamp)`` that
    raises ``SyncError`` on failure; inside an event loop it runs on the
    loop's executor so ticks and logout never wait on the network. Only
    whole minutes are reported; whatever has not been reported successfully
    stays pending and is folded into the next flush.
    """

    def __init__(self, sync, clock=utc_now,
                 inactivity_threshold=INACTIVITY_THRESHOLD_SECONDS):
        self.sync = sync
        self.clock = clock
        self.inactivity_threshold = inactivity_threshold
        self.state = TrackerState.INACTIVE
        self.user_id = None
        self.session_start_time = None
        self.last_activity_time = None
        self._in_flight = None

    @property
    def is_active(self):
        return self.state == TrackerState.ACTIVE

    def start_session(self, user_id):
        now = self.clock()
        self.user_id = user_id
        self.session_start_time = now
        self.last_activity_time = now
        self.state = TrackerState.ACTIVE
        logger.info("tracker_session_started", user_id=user_id)

    def end_session(self):
        if self.is_active:
            self.flush()
        logger.info("tracker_session_ended", user_id=self.user_id)
        self.state = TrackerState.INACTIVE
        self.user_id = None
        self.session_start_time = None
        self.last_activity_time = None

    def record_activity(self):
        """Pointer movement, click, key press, scroll or touch."""
        if self.state == TrackerState.INACTIVE:
            return
        now = self.clock()
        self.last_activity_time = now
        if self.state == TrackerState.IDLE:
            # Idle time is not study time
            self.session_start_time = now
            self.state = TrackerState.ACTIVE
            logger.info("tracker_resumed", user_id=self.user_id)

    def on_visibility_change(self, hidden):
        if hidden:
            if self.is_active:
                self.flush()
                self.state = TrackerState.IDLE
                logger.info("tracker_hidden", user_id=self.user_id)
        elif self.user_id is not None and not self.is_active:
            now = self.clock()
            self.session_start_time = now
            self.last_activity_time = now
            self.state = TrackerState.ACTIVE
            logger.info("tracker_visible", user_id=self.user_id)

    def check_activity_and_sync(self):
        """Periodic tick."""
        if not self.is_active:
            return
        quiet_for = (self.clock() - self.last_activity_time).total_seconds()
        self.flush()
        if quiet_for > self.inactivity_threshold:
            self.state = TrackerState.IDLE
            logger.info("tracker_idle", user_id=self.user_id, quiet_seconds=int(quiet_for))

    def pending_minutes(self):
        if self.session_start_time is None:
            return 0
        elapsed = (self.clock() - self.session_start_time).total_seconds()
        return int(elapsed // 60)

    def current_session_minutes(self):
        return self.pending_minutes() if self.is_active else 0

    @property
    def pending_sync(self):
        """The report currently in flight, if any."""
        return self._in_flight

    def flush(self):
        """Report pending whole minutes without waiting for the server.

        With a running event loop the report is handed to the loop's executor
        and this returns at once; otherwise it is sent inline. Returns True
        when a report was sent. The start time only moves forward once the
        server has accepted the report.
        """
        if self.user_id is None or self.session_start_time is None:
            return False
        if self._in_flight is not None and not self._in_flight.done():
            return False

        minutes = self.pending_minutes()
        if minutes < MIN_SESSION_MINUTES:
            return False

        user_id = self.user_id
        started_from = self.session_start_time
        now = self.clock()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None:
            try:
                self.sync(user_id, minutes, now)
            except SyncError as exc:
                self._sync_failed(user_id, minutes, exc)
                return False
            self._synced(user_id, minutes, started_from, now)
            return True

        self._in_flight = loop.run_in_executor(None, self.sync, user_id, minutes, now)
        self._in_flight.add_done_callback(
            functools.partial(self._on_sync_done, user_id, minutes, started_from, now)
        )
        return True

    def _on_sync_done(self, user_id, minutes, started_from, synced_at, future):
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self._sync_failed(user_id, minutes, exc)
        else:
            self._synced(user_id, minutes, started_from, synced_at)

    def _synced(self, user_id, minutes, started_from, synced_at):
        # Skipped when a resume or logout restarted the interval meanwhile
        if self.session_start_time == started_from:
            self.session_start_time = synced_at
        logger.info("tracker_synced", user_id=user_id, minutes=minutes)

    def _sync_failed(self, user_id, minutes, exc):
        # Start time is kept so the next flush covers this interval too
        logger.warning("tracker_sync_failed", user_id=user_id, minutes=minutes, error=str(exc))


class TrackerLoop:
    """Drives a tracker's periodic check on the running asyncio loop."""

    def __init__(self, tracker, interval=SYNC_INTERVAL_SECONDS):
        self.tracker = tracker
        self.interval = interval
        self._task = None

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
            await asyncio.sleep(self.interval)
            self.tracker.check_activity_and_sync()
