# storefront/services/lock_service.py
import threading
import uuid
from contextlib import contextmanager

import redis
from tenacity import RetryError

from storefront.domain.errors import PersistenceError
from storefront.utils.retry import redis_retry, lock_wait
from storefront.utils.settings import (
    REDIS_URL,
    CART_LOCK_BACKEND,
    CART_LOCK_TTL_SECONDS,
    CART_LOCK_WAIT_SECONDS,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#compare-and-delete in one atomic step, nobody can get in between GET and DEL
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LocalCartLockService:
    """
    Per-user cart lock for a single process.
    Every cart mutation and the whole checkout of one user run under it.
    """

    def __init__(self, wait: float | None = None):
        self.wait = CART_LOCK_WAIT_SECONDS if wait is None else wait
        self._guard = threading.Lock()
        #user_id -> [lock, number of holders and waiters], dropped at zero
        self._locks: dict[str, list] = {}

    def _checkout_lock(self, user_id: str) -> threading.Lock:
        with self._guard:
            entry = self._locks.setdefault(user_id, [threading.Lock(), 0])
            entry[1] += 1
            return entry[0]

    def _return_lock(self, user_id: str):
        with self._guard:
            entry = self._locks[user_id]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[user_id]

    @contextmanager
    def hold(self, user_id: str):
        lock = self._checkout_lock(user_id)
        try:
            if not lock.acquire(timeout=self.wait):
                raise PersistenceError(f"Timed out waiting for cart lock of user {user_id}")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._return_lock(user_id)


class RedisCartLockService:
    """
    Per-user cart lock shared by every worker process.
    - SET NX EX to acquire (expires on its own if the holder dies)
    - Lua compare-and-delete to release only our own token
    """

    def __init__(
        self,
        url: str | None = None,
        client: redis.Redis | None = None,
        ttl: int | None = None,
        wait: float | None = None,
    ):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl or CART_LOCK_TTL_SECONDS
        self.wait = CART_LOCK_WAIT_SECONDS if wait is None else wait

    @staticmethod
    def _key(user_id: str) -> str:
        return f"cart:{user_id}:lock"

    @redis_retry()
    def acquire_cart_lock(self, user_id: str, token: str) -> bool:
        key = self._key(user_id)
        #SET cart:mock123:lock "<token>" NX EX 30
        return bool(self.redis.set(name=key, value=token, nx=True, ex=self.ttl))

    @redis_retry()
    def release_cart_lock(self, user_id: str, token: str) -> bool:
        key = self._key(user_id)
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @contextmanager
    def hold(self, user_id: str):
        token = uuid.uuid4().hex
        acquire = lock_wait(self.wait)(self.acquire_cart_lock)
        try:
            acquire(user_id, token)
        except RetryError as e:
            raise PersistenceError(f"Timed out waiting for cart lock of user {user_id}") from e
        except redis.RedisError as e:
            raise PersistenceError(f"Cart lock unavailable: {e}") from e

        logger.info(f"Acquired cart lock {self._key(user_id)}")
        try:
            yield
        finally:
            try:
                if not self.release_cart_lock(user_id, token):
                    logger.warning(f"Cart lock {self._key(user_id)} expired before release")
            except redis.RedisError as e:
                #the key expires after ttl anyway
                logger.warning(f"Failed to release cart lock {self._key(user_id)}: {e}")


def build_lock_service(backend: str | None = None):
    backend = backend or CART_LOCK_BACKEND
    if backend == "redis":
        return RedisCartLockService()
    if backend == "local":
        return LocalCartLockService()
    raise ValueError(f"Unknown cart lock backend: {backend}")
