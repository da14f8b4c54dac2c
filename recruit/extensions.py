import threading
from contextlib import contextmanager

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from redis import Redis
from redis.exceptions import RedisError

from .errors import BatchInProgressError


class TenantLock:
    """One shortlist batch per tenant at a time.

    Uses a Redis lock when REDIS_URL is reachable so the guarantee holds
    across worker processes; otherwise falls back to an in-process lock table.
    """

    def __init__(self):
        self.redis = None
        self.timeout = 900
        self._guard = threading.Lock()
        self._held = set()
        self._logger = None

    def init_app(self, app):
        self._logger = app.logger
        self.timeout = int(app.config.get("SHORTLIST_LOCK_TIMEOUT", 900))
        url = app.config.get("REDIS_URL")
        self.redis = None
        if not url:
            return
        try:
            conn = Redis.from_url(url, socket_connect_timeout=1)
            conn.ping()
            self.redis = conn
        except RedisError:
            # dev machine without a redis server
            app.logger.warning("Redis unavailable at %s, using in-process tenant locks", url)
            self.redis = None

    @staticmethod
    def key(org_id):
        return f"shortlist:batch:{org_id}"

    def _redis_lock(self, org_id):
        """Acquired Redis lock, or None when Redis can't be used right now."""
        if self.redis is None:
            return None
        try:
            lock = self.redis.lock(self.key(org_id), timeout=self.timeout, blocking=False)
            acquired = lock.acquire()
        except RedisError as e:
            # same fallback as at startup: keep serving with in-process locks
            if self._logger:
                self._logger.warning("Redis lock for %s failed (%s), using in-process tenant lock", self.key(org_id), e)
            return None
        if not acquired:
            raise BatchInProgressError("A shortlist batch is already running for this account")
        return lock

    @contextmanager
    def hold(self, org_id):
        lock = self._redis_lock(org_id)
        if lock is None:
            with self._local(org_id):
                yield
            return
        try:
            yield
        finally:
            try:
                lock.release()
            except RedisError:
                if self._logger:
                    self._logger.warning("Releasing tenant lock %s failed; it expires in %ss", self.key(org_id), self.timeout)

    @contextmanager
    def _local(self, org_id):
        with self._guard:
            if org_id in self._held:
                raise BatchInProgressError("A shortlist batch is already running for this account")
            self._held.add(org_id)
        try:
            yield
        finally:
            with self._guard:
                self._held.discard(org_id)


db = SQLAlchemy()
login_manager = LoginManager()
tenant_lock = TenantLock()
