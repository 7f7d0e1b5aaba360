# storefront/repos/cart_repo.py
import threading
import time
from contextlib import AbstractContextManager
from typing import Callable, Dict, Protocol, Tuple

import redis

from storefront.services.lock_service import LocalLockService, LockService
from storefront.utils.retry import redis_retry
from storefront.utils.settings import CART_BACKEND, CART_TTL_SECONDS, REDIS_URL


class CartRepo(Protocol):
    """Magazyn koszykow per sesja: product_id -> quantity."""

    def load(self, session_id: str) -> Dict[int, int]: ...

    def save(self, session_id: str, items: Dict[int, int]) -> None: ...

    def delete(self, session_id: str) -> None: ...

    def lock(self, session_id: str) -> AbstractContextManager: ...


class MemoryCartRepo:
    """
    Koszyki w pamieci procesu. Jak w redisie: kazdy zapis odswieza TTL,
    wygasly koszyk znika razem z sesja.
    """

    def __init__(self, ttl: float = CART_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.clock = clock
        # session_id -> (items, expires_at)
        self._carts: Dict[str, Tuple[Dict[int, int], float]] = {}
        self._guard = threading.Lock()
        self._locks = LocalLockService()
        self._next_sweep = clock() + ttl

    def _purge_expired(self, now: float) -> None:
        #wolane pod self._guard, pelny przeglad najwyzej raz na ttl
        if now < self._next_sweep:
            return
        for session_id in [s for s, (_, exp) in self._carts.items() if exp <= now]:
            del self._carts[session_id]
        self._next_sweep = now + self.ttl

    def load(self, session_id: str) -> Dict[int, int]:
        with self._guard:
            now = self.clock()
            self._purge_expired(now)
            entry = self._carts.get(session_id)
            if entry is None:
                return {}
            items, expires_at = entry
            if expires_at <= now:
                del self._carts[session_id]
                return {}
            return dict(items)

    def save(self, session_id: str, items: Dict[int, int]) -> None:
        with self._guard:
            now = self.clock()
            self._purge_expired(now)
            if items:
                self._carts[session_id] = (dict(items), now + self.ttl)
            else:
                self._carts.pop(session_id, None)

    def delete(self, session_id: str) -> None:
        with self._guard:
            self._carts.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._carts)

    def lock(self, session_id: str) -> AbstractContextManager:
        return self._locks.session_lock(session_id)


class RedisCartRepo:
    """
    Koszyk jako hash cart:<session_id> (pole = product_id, wartosc = ilosc).
    TTL odswiezany przy kazdym zapisie - koszyk ginie razem z sesja.
    """

    def __init__(
        self,
        client: redis.Redis | None = None,
        url: str | None = None,
        ttl: int = CART_TTL_SECONDS,
        lock_service: LockService | None = None,
    ):
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)
        self.ttl = ttl
        self.lock_service = lock_service or LockService(client=self.redis)

    @staticmethod
    def _key(session_id: str) -> str:
        return f"cart:{session_id}"

    @redis_retry()
    def load(self, session_id: str) -> Dict[int, int]:
        raw = self.redis.hgetall(self._key(session_id))
        return {int(pid): int(qty) for pid, qty in raw.items()}

    @redis_retry()
    def save(self, session_id: str, items: Dict[int, int]) -> None:
        key = self._key(session_id)
        #podmiana calego hasha w jednej transakcji MULTI/EXEC
        pipe = self.redis.pipeline(transaction=True)
        pipe.delete(key)
        if items:
            pipe.hset(key, mapping={str(pid): qty for pid, qty in items.items()})
            pipe.expire(key, self.ttl)
        pipe.execute()

    @redis_retry()
    def delete(self, session_id: str) -> None:
        self.redis.delete(self._key(session_id))

    def lock(self, session_id: str) -> AbstractContextManager:
        return self.lock_service.session_lock(session_id)


def build_cart_repo(backend: str = CART_BACKEND) -> CartRepo:
    if backend == "redis":
        return RedisCartRepo()
    if backend == "memory":
        return MemoryCartRepo()
    raise ValueError(f"Unknown cart backend {backend!r}")
