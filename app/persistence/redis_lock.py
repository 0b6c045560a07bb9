"""
Provide a lightweight per-user lock on Redis.

Serializes mutating requests for the same user so two concurrent
read-modify-write cycles cannot drop a turn. The TTL bounds how long a
crashed holder can keep the lock.
"""

from __future__ import annotations

import uuid
from typing import Dict, Protocol

from redis.asyncio import Redis

# Delete the key only while it still holds our token
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class UserLock(Protocol):
    async def acquire(self, user_id: str) -> bool:
        ...

    async def release(self, user_id: str) -> None:
        ...


class RedisUserLock:
    """
    Wrap a Redis asyncio client and expose acquire/release per user.
    The lock does not own the client's lifecycle; caller is responsible for creation.
    Each acquire stores a fresh token, so a holder whose lock expired cannot
    release the lock another request took over.
    """

    def __init__(self, client: Redis, ttl_seconds: int = 30) -> None:
        self._client = client
        self._ttl_seconds = ttl_seconds
        self._tokens: Dict[str, str] = {}

    @staticmethod
    def _lock_key(user_id: str) -> str:
        return f"lock:user:{user_id}"

    async def acquire(self, user_id: str) -> bool:
        """
        Try to acquire the lock for a user.
        Returns True if lock acquired, False otherwise.
        Implemented with SET key token NX EX.
        """
        key = self._lock_key(user_id)
        token = uuid.uuid4().hex
        locked = await self._client.set(key, token, nx=True, ex=self._ttl_seconds) is True
        if locked:
            self._tokens[user_id] = token
        return locked

    async def release(self, user_id: str) -> None:
        """Release the user lock if this instance still holds it."""
        token = self._tokens.pop(user_id, None)
        if token is None:
            return
        await self._client.eval(_RELEASE_SCRIPT, 1, self._lock_key(user_id), token)
