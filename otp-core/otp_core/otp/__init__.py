"""
OTP Generation, Storage and Verification
========================================
One-time passcodes with keyed hashing, expiry and brute-force lockout.
"""

from .models import OTPCharset, OTPConfig, GeneratedCode, OTPRecord, MAX_OTP_LENGTH
from .exceptions import (
    OTPError,
    OTPConfigurationError,
    InvalidOTPConfigError,
    MissingHashSecretError,
    BackendUnavailableError,
)
from .hashing import (
    generate_numeric_otp,
    generate_alphanumeric_otp,
    generate_salt,
    hash_otp,
    verify_otp_hash,
    mask_identifier,
)
from .generator import OTPGenerator
from .backends import OTPBackend, InMemoryBackend, RedisBackend
from .store import OTPStore

__all__ = [
    # Models
    "OTPCharset",
    "OTPConfig",
    "GeneratedCode",
    "OTPRecord",
    "MAX_OTP_LENGTH",
    # Exceptions
    "OTPError",
    "OTPConfigurationError",
    "InvalidOTPConfigError",
    "MissingHashSecretError",
    "BackendUnavailableError",
    # Hashing
    "generate_numeric_otp",
    "generate_alphanumeric_otp",
    "generate_salt",
    "hash_otp",
    "verify_otp_hash",
    "mask_identifier",
    # Generator
    "OTPGenerator",
    # Backends
    "OTPBackend",
    "InMemoryBackend",
    "RedisBackend",
    # Store
    "OTPStore",
]
