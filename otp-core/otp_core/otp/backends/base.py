"""
OTP Backend Base
================
Key-value contract the OTP store persists records through.
"""

from abc import ABC, abstractmethod
from typing import Optional


class OTPBackend(ABC):
    """
    Abstract key-value backend with per-key TTL in whole seconds.

    Implementations must raise ``BackendUnavailableError`` for infrastructure
    failures and must make the compare-and-* operations atomic per key.
    """

    name: str = "base"

    async def connect(self) -> None:
        """Open connections (no-op by default)."""

    async def close(self) -> None:
        """Release connections (no-op by default)."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store ``value`` under ``key``, expiring after ``ttl_seconds``."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value under ``key`` or None."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """True if ``key`` holds a live value."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete ``key``. Returns whether it existed."""

    @abstractmethod
    async def compare_and_set(self, key: str, expected: str, value: str, ttl_seconds: int) -> bool:
        """
        Replace the value under ``key`` only if it still equals ``expected``.

        Returns:
            True if the write happened
        """

    @abstractmethod
    async def compare_and_delete(self, key: str, expected: str) -> bool:
        """
        Delete ``key`` only if its value still equals ``expected``.

        Returns:
            True if this call deleted it
        """

    @abstractmethod
    async def ttl(self, key: str) -> Optional[int]:
        """Remaining TTL in seconds, None if the key is absent."""

    @abstractmethod
    async def ping(self) -> bool:
        """Check connectivity."""
