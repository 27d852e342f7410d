import requests
import structlog

logger = structlog.get_logger()


class SyncError(Exception):
    """A call to the stats API did not succeed."""


class StatsApiClient:
    """Thin requests wrapper around the study-stats endpoints."""

    def __init__(self, base_url, session=None, timeout=5.0):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _call(self, method, path, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise SyncError(f"{method} {path} failed: {exc}") from exc
        if not r.ok:
            raise SyncError(f"{method} {path} returned {r.status_code}")
        return r.json()

    def post_session_time(self, user_id, minutes, timestamp):
        return self._call(
            "POST",
            "/api/user/session-time",
            json={
                "user_id": user_id,
                "session_time": minutes,
                "timestamp": timestamp.isoformat(),
            },
        )

    def fetch_user(self, user_id):
        return self._call("GET", "/api/user", params={"uid": user_id}).get("user")

    def close(self):
        self.session.close()
