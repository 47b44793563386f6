"""
OTP Generator
=============
High-level OTP generation, hashing and verification class.
"""

import secrets
from datetime import datetime, timezone, timedelta
from typing import Optional, Union
import structlog

from .exceptions import MissingHashSecretError
from .hashing import (
    generate_alphanumeric_otp,
    generate_numeric_otp,
    hash_otp,
    verify_otp_hash,
)
from .models import GeneratedCode, OTPCharset, OTPConfig

logger = structlog.get_logger(__name__)


class OTPGenerator:
    """
    Stateless OTP generation and verification.

    The keyed-hash secret is injected at construction. Without one the
    generator refuses to start unless ``allow_ephemeral_secret`` is set, in
    which case it runs with a random in-process secret and reports itself as
    degraded. Digests issued in that mode do not survive a restart.
    """

    def __init__(
        self,
        config: Optional[OTPConfig] = None,
        secret: Optional[Union[str, bytes]] = None,
        allow_ephemeral_secret: bool = False,
    ):
        self.config = config or OTPConfig()

        if not secret:
            if not allow_ephemeral_secret:
                raise MissingHashSecretError(
                    "OTP hash secret is not configured. Set OTP_HASH_SECRET or "
                    "explicitly allow an ephemeral secret for development."
                )
            logger.warning(
                "OTP hash secret not configured, using ephemeral secret",
                consequence="codes will not verify across restarts",
            )
            secret = secrets.token_bytes(32)
            self._degraded = True
        else:
            self._degraded = False

        self._secret = secret

    @property
    def is_degraded(self) -> bool:
        """True when running on an ephemeral secret."""
        return self._degraded

    def generate(self) -> GeneratedCode:
        """
        Generate a new code with its digest and expiry.

        Returns:
            GeneratedCode (plaintext included, for delivery only)
        """
        if self.config.charset is OTPCharset.ALPHANUMERIC:
            code = generate_alphanumeric_otp(
                self.config.length, self.config.allow_leading_zeros
            )
        else:
            code = generate_numeric_otp(
                self.config.length, self.config.allow_leading_zeros
            )

        expires_at = datetime.now(timezone.utc) + timedelta(minutes=self.config.expiry_minutes)
        return GeneratedCode(plaintext=code, digest=self.hash(code), expires_at=expires_at)

    def hash(self, code: str) -> str:
        """Hash a code with a fresh salt."""
        return hash_otp(code, self._secret)

    def verify(self, plaintext: str, stored_digest: str) -> bool:
        """Check a submitted code against a stored digest in constant time."""
        return verify_otp_hash(plaintext, stored_digest, self._secret)
