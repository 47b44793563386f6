"""
OTP Storage Backends
====================
Key-value backends with per-key TTL for OTP records.
"""

from .base import OTPBackend
from .in_memory import InMemoryBackend
from .redis_backend import RedisBackend, COMPARE_AND_SET_SCRIPT, COMPARE_AND_DELETE_SCRIPT

__all__ = [
    "OTPBackend",
    "InMemoryBackend",
    "RedisBackend",
    # Scripts
    "COMPARE_AND_SET_SCRIPT",
    "COMPARE_AND_DELETE_SCRIPT",
]
