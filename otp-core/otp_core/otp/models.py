"""
OTP Models
==========
Data models and enums for OTP generation and storage.
"""

import json
from datetime import datetime, timezone
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from .exceptions import InvalidOTPConfigError

MAX_OTP_LENGTH = 12


class OTPCharset(str, Enum):
    """Alphabets a code can be drawn from."""
    DIGITS = "digits"
    ALPHANUMERIC = "alphanumeric"

    @classmethod
    def coerce(cls, value: Union[str, "OTPCharset"]) -> "OTPCharset":
        try:
            return cls(value)
        except ValueError:
            raise InvalidOTPConfigError(
                f"Invalid OTP charset {value!r}. Must be one of: "
                + ", ".join(c.value for c in cls)
            ) from None


@dataclass
class OTPConfig:
    """Configuration for OTP generation and verification."""
    length: int = 6
    expiry_minutes: int = 5
    charset: OTPCharset = OTPCharset.DIGITS
    allow_leading_zeros: bool = True
    max_attempts: int = 3

    def __post_init__(self):
        self.charset = OTPCharset.coerce(self.charset)
        if not 1 <= self.length <= MAX_OTP_LENGTH:
            raise InvalidOTPConfigError(
                f"Invalid OTP length. Must be between 1 and {MAX_OTP_LENGTH}"
            )
        if self.expiry_minutes <= 0:
            raise InvalidOTPConfigError("OTP expiry must be a positive number of minutes")
        if self.max_attempts < 1:
            raise InvalidOTPConfigError("OTP max_attempts must be at least 1")


@dataclass(frozen=True)
class GeneratedCode:
    """
    A freshly generated code.

    ``plaintext`` is handed to the delivery channel once and never stored.
    """
    plaintext: str = field(repr=False)
    digest: str
    expires_at: datetime

    def __repr__(self) -> str:
        return (
            f"GeneratedCode(plaintext='{'*' * len(self.plaintext)}', "
            f"expires_at={self.expires_at.isoformat()})"
        )


@dataclass
class OTPRecord:
    """The persisted state of an outstanding OTP for one identifier."""
    digest: str
    expires_at: datetime
    attempts: int = 0

    @property
    def is_expired(self) -> bool:
        return self.expires_at < datetime.now(timezone.utc)

    def to_json(self) -> str:
        return json.dumps(
            {
                "hash": self.digest,
                "expiresAt": self.expires_at.isoformat(),
                "attempts": self.attempts,
            },
            separators=(',', ':'),
        )

    @classmethod
    def from_json(cls, raw: Union[str, bytes]) -> "OTPRecord":
        """
        Decode a stored record.

        Raises:
            ValueError: If the payload is not a valid record
        """
        try:
            data = json.loads(raw)
            expires_at = datetime.fromisoformat(data["expiresAt"].replace("Z", "+00:00"))
            attempts = int(data["attempts"])
            digest = data["hash"]
        except (TypeError, KeyError, AttributeError, json.JSONDecodeError) as e:
            raise ValueError(f"Malformed OTP record: {e}") from e

        if not isinstance(digest, str) or attempts < 0:
            raise ValueError("Malformed OTP record: bad hash or attempts")
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)

        return cls(digest=digest, expires_at=expires_at, attempts=attempts)
