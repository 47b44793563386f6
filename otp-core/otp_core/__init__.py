"""
OTP Core Library
================
One-time passcode issuance, storage and verification.
"""

__version__ = "0.1.0"

# OTP
from otp_core.otp import (
    OTPCharset,
    OTPConfig,
    GeneratedCode,
    OTPRecord,
    OTPGenerator,
    OTPStore,
    OTPBackend,
    InMemoryBackend,
    RedisBackend,
    hash_otp,
    verify_otp_hash,
    OTPError,
    OTPConfigurationError,
    InvalidOTPConfigError,
    MissingHashSecretError,
    BackendUnavailableError,
)

# Configuration
from otp_core.config import OTPSettings, build_store

# Delivery
from otp_core.delivery import (
    DeliveryChannel,
    DeliveryResult,
    DeliveryError,
    UnknownChannelError,
    EmailChannel,
    SmsChannel,
    LogChannel,
    ChannelRegistry,
    create_channel,
)

# Health
from otp_core.health import check_otp_health, HealthStatus, HealthResponse

# Logging
from otp_core.logging import setup_logging

# Metrics
from otp_core.metrics import get_metrics_text

__all__ = [
    # OTP
    "OTPCharset",
    "OTPConfig",
    "GeneratedCode",
    "OTPRecord",
    "OTPGenerator",
    "OTPStore",
    "OTPBackend",
    "InMemoryBackend",
    "RedisBackend",
    "hash_otp",
    "verify_otp_hash",
    "OTPError",
    "OTPConfigurationError",
    "InvalidOTPConfigError",
    "MissingHashSecretError",
    "BackendUnavailableError",
    # Configuration
    "OTPSettings",
    "build_store",
    # Delivery
    "DeliveryChannel",
    "DeliveryResult",
    "DeliveryError",
    "UnknownChannelError",
    "EmailChannel",
    "SmsChannel",
    "LogChannel",
    "ChannelRegistry",
    "create_channel",
    # Health
    "check_otp_health",
    "HealthStatus",
    "HealthResponse",
    # Logging
    "setup_logging",
    # Metrics
    "get_metrics_text",
]
