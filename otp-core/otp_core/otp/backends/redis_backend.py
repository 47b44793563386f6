"""
Redis OTP Backend
=================
Redis-backed key-value store using Lua scripts for atomic compare-and-swap.
"""

from typing import Any, Awaitable, Callable, Dict, Optional
import structlog
from redis import asyncio as aioredis
from redis.exceptions import NoScriptError, RedisError

from ..exceptions import BackendUnavailableError
from .base import OTPBackend

logger = structlog.get_logger(__name__)

# KEYS[1] = key, ARGV = expected, new value, ttl seconds
COMPARE_AND_SET_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if current ~= ARGV[1] then
    return 0
end
redis.call('SET', KEYS[1], ARGV[2], 'EX', tonumber(ARGV[3]))
return 1
"""

# KEYS[1] = key, ARGV = expected
COMPARE_AND_DELETE_SCRIPT = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""


class RedisBackend(OTPBackend):
    """
    Redis-backed OTP storage.

    Uses Lua scripts for atomic compare-and-swap. Every Redis failure is
    raised as ``BackendUnavailableError``; there is no fail-open path.
    """

    name = "redis"

    def __init__(self, redis_client):
        """
        Args:
            redis_client: Async Redis client created with ``decode_responses=True``
        """
        self.redis = redis_client
        self._script_shas: Dict[str, str] = {}

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisBackend":
        """Create a backend from a connection string such as ``redis://localhost:6379/0``."""
        kwargs.setdefault("decode_responses", True)
        return cls(aioredis.from_url(url, **kwargs))

    async def _execute(self, operation: str, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        try:
            return await func(*args, **kwargs)
        except RedisError as e:
            logger.error(
                "OTP backend operation failed",
                backend=self.name,
                operation=operation,
                error=str(e),
            )
            raise BackendUnavailableError(str(e), backend=self.name, operation=operation) from e

    async def _ensure_script(self, script: str) -> str:
        """Load a Lua script into Redis if needed."""
        sha = self._script_shas.get(script)
        if sha is None:
            sha = await self._execute("script_load", self.redis.script_load, script)
            self._script_shas[script] = sha
        return sha

    async def _run_script(self, operation: str, script: str, key: str, *args) -> int:
        sha = await self._ensure_script(script)
        try:
            result = await self.redis.evalsha(sha, 1, key, *args)
        except NoScriptError:
            # Script cache flushed (e.g. Redis restart); reload once
            self._script_shas.pop(script, None)
            sha = await self._ensure_script(script)
            result = await self._execute(operation, self.redis.evalsha, sha, 1, key, *args)
        except RedisError as e:
            logger.error("OTP backend script failed", backend=self.name, operation=operation, error=str(e))
            raise BackendUnavailableError(str(e), backend=self.name, operation=operation) from e
        return int(result)

    async def connect(self) -> None:
        await self.ping()
        logger.info("OTP backend connected", backend=self.name)

    async def close(self) -> None:
        await self.redis.aclose()
        logger.info("OTP backend closed", backend=self.name)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._execute("set", self.redis.set, key, value, ex=ttl_seconds)

    async def get(self, key: str) -> Optional[str]:
        return await self._execute("get", self.redis.get, key)

    async def exists(self, key: str) -> bool:
        return await self._execute("exists", self.redis.exists, key) == 1

    async def delete(self, key: str) -> bool:
        return await self._execute("delete", self.redis.delete, key) > 0

    async def compare_and_set(self, key: str, expected: str, value: str, ttl_seconds: int) -> bool:
        return await self._run_script(
            "compare_and_set", COMPARE_AND_SET_SCRIPT, key, expected, value, ttl_seconds
        ) == 1

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        return await self._run_script(
            "compare_and_delete", COMPARE_AND_DELETE_SCRIPT, key, expected
        ) == 1

    async def ttl(self, key: str) -> Optional[int]:
        remaining = await self._execute("ttl", self.redis.ttl, key)
        # -2: missing key, -1: no expiry
        if remaining == -2:
            return None
        return remaining

    async def ping(self) -> bool:
        return bool(await self._execute("ping", self.redis.ping))
