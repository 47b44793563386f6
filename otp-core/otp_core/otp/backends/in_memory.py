"""
In-Memory OTP Backend
=====================
Dictionary-backed key-value store with TTL for development and testing.
"""

import math
import time
from typing import Dict, Optional, Tuple

from .base import OTPBackend


class InMemoryBackend(OTPBackend):
    """
    Simple in-memory backend with lazy expiry and a sweep on every write.

    For development and testing only.
    Use RedisBackend in production.

    None of the methods await, so each one is atomic on the event loop.
    """

    name = "memory"

    def __init__(self):
        self._data: Dict[str, Tuple[str, float]] = {}

    def _live(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= time.monotonic():
            del self._data[key]
            return None
        return value

    def _cleanup(self) -> None:
        """Remove expired entries."""
        now = time.monotonic()
        expired = [key for key, (_, expires_at) in self._data.items() if expires_at <= now]
        for key in expired:
            del self._data[key]

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._cleanup()
        self._data[key] = (value, time.monotonic() + ttl_seconds)

    async def get(self, key: str) -> Optional[str]:
        return self._live(key)

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def delete(self, key: str) -> bool:
        existed = self._live(key) is not None
        self._data.pop(key, None)
        return existed

    async def compare_and_set(self, key: str, expected: str, value: str, ttl_seconds: int) -> bool:
        if self._live(key) != expected:
            return False
        await self.set(key, value, ttl_seconds)
        return True

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        if self._live(key) != expected:
            return False
        del self._data[key]
        return True

    async def ttl(self, key: str) -> Optional[int]:
        if self._live(key) is None:
            return None
        return math.ceil(self._data[key][1] - time.monotonic())

    async def ping(self) -> bool:
        return True
