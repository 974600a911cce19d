"""
Per-(user, subject) serialization of progress updates
"""
import logging
import threading
import weakref
from contextlib import contextmanager

from redis.exceptions import LockError, RedisError

from app.config import settings
from app.exceptions import UnavailableError
from app.utils.cache import cache_service

logger = logging.getLogger(__name__)


class ProgressLockManager:
    """
    Lock keyed by (user, subject) so concurrent submissions apply one at a time

    Redis locks when Redis is reachable, process-local locks otherwise.
    """

    def __init__(self, redis_client=None, timeout: int = 30, wait: int = 10):
        self.redis_client = redis_client
        self.timeout = timeout
        self.wait = wait
        # entries vanish once no holder or waiter references the lock
        self._local_locks = weakref.WeakValueDictionary()
        self._registry_lock = threading.Lock()

    @staticmethod
    def key(user_id, subject_id) -> str:
        return f"progress:{user_id}:{subject_id}"

    def _local_lock(self, key: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._local_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._local_locks[key] = lock
            return lock

    @contextmanager
    def hold(self, user_id, subject_id):
        """
        Hold the progress lock for a (user, subject) pair

        Raises:
            UnavailableError: lock not obtained within the wait time
        """
        key = self.key(user_id, subject_id)

        if self.redis_client is not None:
            try:
                lock = self.redis_client.lock(
                    key, timeout=self.timeout, blocking_timeout=self.wait
                )
                acquired = lock.acquire()
            except RedisError as e:
                logger.warning(f"Redis lock unavailable ({str(e)}), using local lock for {key}")
            else:
                if not acquired:
                    raise UnavailableError("Another submission for this subject is in progress")
                try:
                    yield
                finally:
                    try:
                        lock.release()
                    except LockError as e:
                        logger.warning(f"Progress lock {key} expired before release: {str(e)}")
                return

        lock = self._local_lock(key)
        if not lock.acquire(timeout=self.wait):
            raise UnavailableError("Another submission for this subject is in progress")
        try:
            yield
        finally:
            lock.release()


# Global instance
progress_locks = ProgressLockManager(
    redis_client=cache_service.redis_client,
    timeout=settings.PROGRESS_LOCK_TIMEOUT,
    wait=settings.PROGRESS_LOCK_WAIT,
)
