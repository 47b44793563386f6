"""
Unit Tests for Configuration and Health Reporting
=================================================
"""

from unittest.mock import AsyncMock, patch

import pytest

from otp_core.config import OTPSettings, build_store
from otp_core.health import HealthStatus, check_otp_health
from otp_core.otp import (
    BackendUnavailableError,
    InMemoryBackend,
    InvalidOTPConfigError,
    MissingHashSecretError,
    OTPCharset,
    OTPGenerator,
    OTPStore,
    RedisBackend,
)


class TestSettings:
    """Tests for environment-driven settings."""

    def test_from_env(self):
        settings = OTPSettings.from_env({
            "OTP_HASH_SECRET": "s3cret",
            "OTP_LENGTH": "8",
            "OTP_EXPIRY_MINUTES": "10",
            "OTP_CHARSET": "alphanumeric",
            "OTP_ALLOW_LEADING_ZEROS": "false",
            "OTP_MAX_ATTEMPTS": "5",
            "OTP_REDIS_URL": "redis://cache:6379/1",
            "OTP_ENV": "Development",
        })

        assert settings.hash_secret == "s3cret"
        assert settings.redis_url == "redis://cache:6379/1"
        assert settings.environment == "development"

        config = settings.otp_config()
        assert config.length == 8
        assert config.expiry_minutes == 10
        assert config.charset is OTPCharset.ALPHANUMERIC
        assert config.allow_leading_zeros is False
        assert config.max_attempts == 5

    def test_defaults(self):
        settings = OTPSettings.from_env({})

        assert settings.hash_secret is None
        assert settings.environment == "production"
        assert settings.allow_ephemeral_secret is False
        assert settings.otp_config().length == 6

    def test_invalid_integer(self):
        with pytest.raises(InvalidOTPConfigError):
            OTPSettings.from_env({"OTP_LENGTH": "six"})

    def test_invalid_length_fails_at_build(self):
        settings = OTPSettings.from_env({"OTP_HASH_SECRET": "x", "OTP_LENGTH": "13"})
        with pytest.raises(InvalidOTPConfigError):
            build_store(settings, backend=InMemoryBackend())


class TestBuildStore:
    """Tests for wiring the store from settings."""

    def test_production_without_secret_refuses_to_start(self):
        settings = OTPSettings.from_env({"OTP_ENV": "production"})
        with pytest.raises(MissingHashSecretError):
            build_store(settings, backend=InMemoryBackend())

    def test_development_without_secret_is_degraded(self):
        settings = OTPSettings.from_env({"OTP_ENV": "development"})
        store = build_store(settings, backend=InMemoryBackend())
        assert store.is_degraded is True

    def test_builds_redis_store_by_default(self):
        settings = OTPSettings.from_env({"OTP_HASH_SECRET": "x", "OTP_MAX_ATTEMPTS": "4"})
        store = build_store(settings)

        assert isinstance(store.backend, RedisBackend)
        assert store.max_attempts == 4

    async def test_built_store_round_trip(self):
        settings = OTPSettings.from_env({"OTP_HASH_SECRET": "x", "OTP_LENGTH": "4"})
        store = build_store(settings, backend=InMemoryBackend())

        otp = await store.create_otp("alice@example.com")
        assert len(otp.plaintext) == 4
        assert await store.verify_otp("alice@example.com", otp.plaintext) is True


class TestHealth:
    """Tests for the health report."""

    async def test_healthy(self, store):
        report = await check_otp_health(store, service_name="auth")

        assert report.status == HealthStatus.HEALTHY
        assert report.service == "auth"
        assert report.components["backend"].status == "connected"
        assert report.components["hash_secret"].status == "configured"

    async def test_ephemeral_secret_is_degraded(self):
        store = OTPStore(InMemoryBackend(), OTPGenerator(allow_ephemeral_secret=True))
        report = await check_otp_health(store)

        assert report.status == HealthStatus.DEGRADED
        assert report.components["hash_secret"].status == "ephemeral"

    async def test_backend_down_is_unhealthy(self, generator):
        backend = InMemoryBackend()
        backend.ping = AsyncMock(side_effect=BackendUnavailableError("down", backend="memory"))
        report = await check_otp_health(OTPStore(backend, generator))

        assert report.status == HealthStatus.UNHEALTHY
        assert report.components["backend"].status == "error"

    async def test_version_defaults_to_package(self, store):
        from otp_core import __version__

        report = await check_otp_health(store)
        assert report.version == __version__


class TestLogging:
    """Tests for logging setup and identifier masking."""

    def test_setup_logging_json(self):
        import logging
        import structlog
        from otp_core.logging import service_name_var, setup_logging

        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            with patch("otp_core.logging.structlog.configure") as configure:
                setup_logging("auth-service", level="debug")
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

        processors = configure.call_args.kwargs["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert service_name_var.get() == "auth-service"

    def test_setup_logging_console(self):
        import logging
        import structlog
        from otp_core.logging import setup_logging

        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            with patch("otp_core.logging.structlog.configure") as configure:
                setup_logging("auth-service", json_output=False)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

        processors = configure.call_args.kwargs["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    @pytest.mark.parametrize(
        "identifier,masked",
        [
            ("alice@example.com", "al***@example.com"),
            ("+14155551234", "+1***1234"),
            ("u1", "***"),
        ],
    )
    def test_mask_identifier(self, identifier, masked):
        from otp_core.otp import mask_identifier

        assert mask_identifier(identifier) == masked
