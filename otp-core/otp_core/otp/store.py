"""
OTP Store
=========
Lifecycle of one OTP record per identifier: create, verify, lock out.
"""

import math
from datetime import datetime, timezone
from typing import Optional
import structlog

from otp_core.metrics import VerificationOutcome, record_issued, record_verification
from .backends import OTPBackend, RedisBackend
from .generator import OTPGenerator
from .hashing import mask_identifier
from .models import GeneratedCode, OTPRecord

logger = structlog.get_logger(__name__)


def ttl_seconds_until(expires_at: datetime) -> int:
    """Whole seconds until ``expires_at``, rounded up."""
    return math.ceil((expires_at - datetime.now(timezone.utc)).total_seconds())


class OTPStore:
    """
    Issues and verifies OTPs persisted in a key-value backend.

    A record lives under ``otp:<identifier>`` with a TTL matching its expiry.
    Issuing a new code overwrites the previous one. Verification consumes
    the record on success, on expiry and when the attempt limit is reached.

    Verification only ever answers True or False; the reason for a failure
    is logged but never returned. Backend failures raise
    ``BackendUnavailableError``.

    Attempt counting uses compare-and-swap so concurrent submissions for the
    same identifier neither lose increments nor consume a code twice.
    """

    KEY_PREFIX = "otp:"
    MAX_CAS_RETRIES = 3

    def __init__(
        self,
        backend: OTPBackend,
        generator: OTPGenerator,
        max_attempts: Optional[int] = None,
    ):
        """
        Args:
            backend: Key-value backend with per-key TTL
            generator: Code generator holding the hash secret
            max_attempts: Failed verifications before lockout
                (defaults to the generator's configuration)
        """
        self.backend = backend
        self.generator = generator
        self.max_attempts = max_attempts if max_attempts is not None else generator.config.max_attempts
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def from_url(
        cls,
        redis_url: str,
        generator: OTPGenerator,
        max_attempts: Optional[int] = None,
        **redis_kwargs,
    ) -> "OTPStore":
        """Create a Redis-backed store from a connection string."""
        return cls(RedisBackend.from_url(redis_url, **redis_kwargs), generator, max_attempts)

    @property
    def is_degraded(self) -> bool:
        return self.generator.is_degraded

    async def connect(self) -> None:
        await self.backend.connect()

    async def close(self) -> None:
        await self.backend.close()

    async def __aenter__(self) -> "OTPStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _build_key(self, identifier: str) -> str:
        return f"{self.KEY_PREFIX}{identifier}"

    async def create_otp(self, identifier: str) -> GeneratedCode:
        """
        Issue a new code for an identifier, replacing any outstanding one.

        Args:
            identifier: Email address, phone number or user id

        Returns:
            GeneratedCode to hand to a delivery channel
        """
        otp = self.generator.generate()
        record = OTPRecord(digest=otp.digest, expires_at=otp.expires_at, attempts=0)

        await self.backend.set(
            self._build_key(identifier),
            record.to_json(),
            ttl_seconds_until(otp.expires_at),
        )

        record_issued(self.generator.config.charset.value)
        logger.info(
            "OTP created",
            identifier=mask_identifier(identifier),
            expires_at=otp.expires_at.isoformat(),
        )
        return otp

    async def verify_otp(self, identifier: str, submitted_code: str) -> bool:
        """
        Verify a submitted code.

        Returns:
            True only for a correct, unexpired, not locked-out code
        """
        key = self._build_key(identifier)

        for _ in range(self.MAX_CAS_RETRIES):
            result = await self._attempt_verification(key, identifier, submitted_code)
            if result is not None:
                return result

        logger.warning(
            "OTP verification contended, giving up",
            identifier=mask_identifier(identifier),
            retries=self.MAX_CAS_RETRIES,
        )
        record_verification(VerificationOutcome.CONTENDED)
        return False

    async def _attempt_verification(self, key: str, identifier: str, submitted_code: str) -> Optional[bool]:
        """One read-check-write pass. Returns None if the record changed underneath."""
        masked = mask_identifier(identifier)

        raw = await self.backend.get(key)
        if raw is None:
            record_verification(VerificationOutcome.MISSING)
            return False

        try:
            record = OTPRecord.from_json(raw)
        except ValueError as e:
            logger.error("Corrupt OTP record discarded", identifier=masked, error=str(e))
            await self.backend.compare_and_delete(key, raw)
            record_verification(VerificationOutcome.CORRUPT)
            return False

        if record.is_expired:
            await self.backend.compare_and_delete(key, raw)
            logger.info("OTP expired", identifier=masked)
            record_verification(VerificationOutcome.EXPIRED)
            return False

        if record.attempts >= self.max_attempts:
            await self.backend.compare_and_delete(key, raw)
            logger.warning("OTP attempts exhausted", identifier=masked)
            record_verification(VerificationOutcome.LOCKED_OUT)
            return False

        if self.generator.verify(submitted_code, record.digest):
            if not await self.backend.compare_and_delete(key, raw):
                return None
            logger.info("OTP verified successfully", identifier=masked)
            record_verification(VerificationOutcome.VERIFIED)
            return True

        record.attempts += 1

        if record.attempts >= self.max_attempts:
            if not await self.backend.compare_and_delete(key, raw):
                return None
            logger.warning("OTP locked out", identifier=masked, attempts=record.attempts)
            record_verification(VerificationOutcome.LOCKED_OUT)
            return False

        # TTL always derives from the original expiry, never reset forward
        ttl = ttl_seconds_until(record.expires_at)
        if ttl <= 0:
            await self.backend.compare_and_delete(key, raw)
            record_verification(VerificationOutcome.EXPIRED)
            return False

        if not await self.backend.compare_and_set(key, raw, record.to_json(), ttl):
            return None

        logger.warning(
            "Invalid OTP attempt",
            identifier=masked,
            remaining=self.max_attempts - record.attempts,
        )
        record_verification(VerificationOutcome.MISMATCH)
        return False

    async def is_blocked(self, identifier: str) -> bool:
        """
        True while a live code exists for the identifier.

        Callers use this to refuse issuing another code; the store itself
        does not enforce it.
        """
        return await self.backend.exists(self._build_key(identifier))

    async def revoke(self, identifier: str) -> bool:
        """Discard any outstanding code. Returns whether one existed."""
        revoked = await self.backend.delete(self._build_key(identifier))
        if revoked:
            logger.info("OTP revoked", identifier=mask_identifier(identifier))
        return revoked

    async def remaining_attempts(self, identifier: str) -> Optional[int]:
        """Attempts left on the live code, or None if there is none."""
        raw = await self.backend.get(self._build_key(identifier))
        if raw is None:
            return None
        try:
            record = OTPRecord.from_json(raw)
        except ValueError:
            return None
        if record.is_expired:
            return None
        return max(0, self.max_attempts - record.attempts)
