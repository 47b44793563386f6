"""
OTP Configuration
=================
Settings for the OTP store and delivery channels, loaded from the environment.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from otp_core.otp import OTPConfig, OTPGenerator, OTPStore
from otp_core.otp.exceptions import InvalidOTPConfigError

PRODUCTION = "production"


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidOTPConfigError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class OTPSettings:
    """Process configuration for the OTP subsystem."""
    hash_secret: Optional[str] = None
    length: int = 6
    expiry_minutes: int = 5
    charset: str = "digits"
    allow_leading_zeros: bool = True
    max_attempts: int = 3
    redis_url: str = "redis://localhost:6379/0"
    environment: str = PRODUCTION

    # Email delivery
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    mail_from: Optional[str] = None

    # SMS delivery
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_from_number: Optional[str] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "OTPSettings":
        """Load settings from environment variables (``os.environ`` by default)."""
        env = os.environ if env is None else env
        return cls(
            hash_secret=env.get("OTP_HASH_SECRET") or None,
            length=_env_int(env, "OTP_LENGTH", 6),
            expiry_minutes=_env_int(env, "OTP_EXPIRY_MINUTES", 5),
            charset=env.get("OTP_CHARSET", "digits"),
            allow_leading_zeros=_env_bool(env.get("OTP_ALLOW_LEADING_ZEROS", "true")),
            max_attempts=_env_int(env, "OTP_MAX_ATTEMPTS", 3),
            redis_url=env.get("OTP_REDIS_URL", "redis://localhost:6379/0"),
            environment=env.get("OTP_ENV", PRODUCTION).lower(),
            smtp_host=env.get("SMTP_HOST") or None,
            smtp_port=_env_int(env, "SMTP_PORT", 587),
            smtp_user=env.get("SMTP_USER") or None,
            smtp_password=env.get("SMTP_PASS") or None,
            mail_from=env.get("MAIL_FROM") or None,
            twilio_account_sid=env.get("TWILIO_ACCOUNT_SID") or None,
            twilio_auth_token=env.get("TWILIO_AUTH_TOKEN") or None,
            twilio_from_number=env.get("TWILIO_FROM_NUMBER") or None,
        )

    @property
    def allow_ephemeral_secret(self) -> bool:
        """Ephemeral hash secrets are refused in production."""
        return self.environment != PRODUCTION

    def otp_config(self) -> OTPConfig:
        return OTPConfig(
            length=self.length,
            expiry_minutes=self.expiry_minutes,
            charset=self.charset,
            allow_leading_zeros=self.allow_leading_zeros,
            max_attempts=self.max_attempts,
        )


def build_store(settings: Optional[OTPSettings] = None, backend=None) -> OTPStore:
    """
    Wire a generator, backend and store from settings.

    Args:
        settings: Defaults to ``OTPSettings.from_env()``
        backend: Backend override; a Redis backend at ``settings.redis_url`` otherwise

    Raises:
        MissingHashSecretError: No secret configured in production
    """
    settings = settings or OTPSettings.from_env()
    generator = OTPGenerator(
        settings.otp_config(),
        secret=settings.hash_secret,
        allow_ephemeral_secret=settings.allow_ephemeral_secret,
    )
    if backend is None:
        return OTPStore.from_url(settings.redis_url, generator, settings.max_attempts)
    return OTPStore(backend, generator, settings.max_attempts)
