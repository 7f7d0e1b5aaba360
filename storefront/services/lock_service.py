import threading
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator, List

import redis
from redis.exceptions import RedisError
from tenacity import RetryError, Retrying, retry_if_result, stop_after_delay, wait_fixed

from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, SESSION_LOCK_TTL_SECONDS, SESSION_LOCK_WAIT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#LUA porownaj i przedluz
_EXTEND_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('PEXPIRE', KEYS[1], ARGV[2])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nikt nie wcisnie sie miedzy GET a DEL/PEXPIRE
#wiec nie zwolnimy ani nie przedluzymy locka, ktory po wygasnieciu przejal inny request


class SessionLockTimeout(RuntimeError):
    pass


class HeldLock:
    """Uchwyt trzymanego locka sesji; extend() przesuwa wygasniecie."""

    def __init__(self, session_id: str, service: "LockService | None" = None, token: str | None = None):
        self.session_id = session_id
        self.service = service
        self.token = token

    def extend(self, ttl: float) -> bool:
        if self.service is None:
            #lock w pamieci procesu nie wygasa
            return True
        return self.service.extend_session_lock(self.session_id, self.token, ttl)


class LockService:
    """
    -blokada sesji (jeden read-modify-write koszyka naraz)
    -zwalnianie i przedluzanie locka tylko przez wlasciciela (token)
    -atomowosc przy pomocy lua
    """

    def __init__(
        self,
        client: redis.Redis | None = None,
        url: str | None = None,
        ttl: int = SESSION_LOCK_TTL_SECONDS,
        wait: float = SESSION_LOCK_WAIT_SECONDS,
    ):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl
        self.wait = wait
        #locki trzymane przez biezacy watek, lock jest reentrant
        self._held = threading.local()

    @staticmethod
    def _key(session_id: str) -> str:
        return f"session:{session_id}:lock"

    @redis_retry()
    def acquire_session_lock(self, session_id: str, token: str) -> bool:
        key = self._key(session_id)
        #SET session:abc:lock "<token>" NX EX 10
        return bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True,  #tylko jesli klucz nie istnieje
                ex=self.ttl,  #wygasa sam, nawet jak proces padnie
            )
        )

    @redis_retry()
    def extend_session_lock(self, session_id: str, token: str, ttl: float) -> bool:
        key = self._key(session_id)
        res = self.redis.eval(_EXTEND_LUA, 1, key, token, int(ttl * 1000))
        if not res:
            logger.warning(f"Session {session_id} lock expired before it could be extended")
        return bool(res)

    @redis_retry()
    def release_session_lock(self, session_id: str, token: str) -> bool:
        key = self._key(session_id)
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @contextmanager
    def session_lock(self, session_id: str) -> Iterator[HeldLock]:
        held = getattr(self._held, "locks", None)
        if held is None:
            held = self._held.locks = {}
        if session_id in held:
            yield held[session_id]
            return

        token = uuid.uuid4().hex
        #czekaj az lock sie zwolni, max self.wait sekund
        waiting = Retrying(
            stop=stop_after_delay(self.wait),
            wait=wait_fixed(0.05),
            retry=retry_if_result(lambda acquired: not acquired),
        )
        try:
            waiting(self.acquire_session_lock, session_id, token)
        except RetryError as e:
            logger.warning(f"Session {session_id} lock not acquired within {self.wait}s")
            raise SessionLockTimeout(f"Session {session_id} is busy") from e

        handle = held[session_id] = HeldLock(session_id, self, token)
        try:
            yield handle
        finally:
            del held[session_id]
            try:
                if not self.release_session_lock(session_id, token):
                    #ktos inny mogl juz wejsc w sekcje krytyczna
                    logger.warning(f"Session {session_id} lock expired while held")
            except RedisError as e:
                #lock i tak wygasnie po ttl
                logger.warning(f"Failed to release lock for session {session_id}: {e}")


class LocalLockService:
    """
    Lock per sesja w pamieci procesu (backend memory).
    Wpis istnieje tylko dopoki ktos trzyma lock albo na niego czeka.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # session_id -> [RLock, liczba trzymajacych/czekajacych]
        self._locks: Dict[str, List] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @contextmanager
    def session_lock(self, session_id: str) -> Iterator[HeldLock]:
        with self._guard:
            entry = self._locks.get(session_id)
            if entry is None:
                entry = self._locks[session_id] = [threading.RLock(), 0]
            entry[1] += 1

        try:
            with entry[0]:
                yield HeldLock(session_id)
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[session_id]
