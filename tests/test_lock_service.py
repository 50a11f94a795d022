"""Tests for the per-user cart locks."""

import threading
import time
from unittest.mock import MagicMock

import pytest
import redis

from storefront.domain.errors import PersistenceError
from storefront.services.lock_service import (
    LocalCartLockService,
    RedisCartLockService,
    build_lock_service,
)


class TestLocalCartLockService:
    def test_same_user_is_serialized(self):
        locks = LocalCartLockService(wait=2)
        events = []

        def worker(name):
            with locks.hold("u1"):
                events.append(f"{name}-in")
                time.sleep(0.05)
                events.append(f"{name}-out")

        threads = [threading.Thread(target=worker, args=(n,)) for n in ("a", "b")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        #no interleaving: every "in" is followed by its own "out"
        assert events[0][0] == events[1][0]
        assert events[2][0] == events[3][0]

    def test_different_users_do_not_block(self):
        locks = LocalCartLockService(wait=0.05)
        with locks.hold("u1"):
            with locks.hold("u2"):
                pass

    def test_timeout_raises_persistence_error(self):
        locks = LocalCartLockService(wait=0.05)
        with locks.hold("u1"):
            with pytest.raises(PersistenceError):
                with locks.hold("u1"):
                    pass

    def test_lock_released_after_exception(self):
        locks = LocalCartLockService(wait=0.05)
        with pytest.raises(RuntimeError):
            with locks.hold("u1"):
                raise RuntimeError("boom")

        with locks.hold("u1"):
            pass


    def test_idle_locks_are_dropped(self):
        locks = LocalCartLockService(wait=0.05)
        for n in range(100):
            with locks.hold(f"user-{n}"):
                pass

        assert locks._locks == {}

    def test_lock_kept_while_another_holder_remains(self):
        locks = LocalCartLockService(wait=0.05)
        with locks.hold("u1"):
            with pytest.raises(PersistenceError):
                with locks.hold("u1"):
                    pass
            assert "u1" in locks._locks

        assert locks._locks == {}


class TestRedisCartLockService:
    def _service(self, client, wait=0.2):
        return RedisCartLockService(client=client, ttl=30, wait=wait)

    def test_hold_sets_and_releases_own_token(self):
        client = MagicMock()
        client.set.return_value = True
        client.eval.return_value = 1

        with self._service(client).hold("u1"):
            kwargs = client.set.call_args.kwargs
            assert kwargs["name"] == "cart:u1:lock"
            assert kwargs["nx"] is True
            assert kwargs["ex"] == 30

        token = client.set.call_args.kwargs["value"]
        args = client.eval.call_args.args
        assert args[1:] == (1, "cart:u1:lock", token)

    def test_waits_until_lock_is_free(self):
        client = MagicMock()
        client.set.side_effect = [None, None, True]
        client.eval.return_value = 1

        with self._service(client, wait=1).hold("u1"):
            pass

        assert client.set.call_count == 3

    def test_timeout_raises_persistence_error(self):
        client = MagicMock()
        client.set.return_value = None

        with pytest.raises(PersistenceError):
            with self._service(client, wait=0.1).hold("u1"):
                pass

        client.eval.assert_not_called()

    def test_redis_down_raises_persistence_error(self, monkeypatch):
        monkeypatch.setattr("time.sleep", lambda _: None)
        client = MagicMock()
        client.set.side_effect = redis.ConnectionError("refused")

        with pytest.raises(PersistenceError):
            with self._service(client).hold("u1"):
                pass


def test_build_lock_service():
    assert isinstance(build_lock_service("local"), LocalCartLockService)
    with pytest.raises(ValueError):
        build_lock_service("memcached")
