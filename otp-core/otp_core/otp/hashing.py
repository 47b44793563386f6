"""
OTP Hashing Utilities
=====================
Secure code generation, keyed hashing and verification functions.
"""

import math
import secrets
import hashlib
import hmac
import string
from typing import Optional, Union
import structlog

logger = structlog.get_logger(__name__)

DIGITS = string.digits
ALPHANUMERIC = string.digits + string.ascii_uppercase

SALT_BYTES = 16
DIGEST_DELIMITER = "$"

# Longest numeric code drawn with the exact range primitive
MAX_EXACT_NUMERIC_LENGTH = 9


def generate_numeric_otp(length: int = 6, allow_leading_zeros: bool = True) -> str:
    """
    Generate a secure random numeric OTP.

    Args:
        length: Number of digits
        allow_leading_zeros: Allow codes such as ``"012345"``

    Returns:
        OTP string of exactly ``length`` digits
    """
    if length <= MAX_EXACT_NUMERIC_LENGTH:
        low = 0 if allow_leading_zeros else 10 ** (length - 1)
        high = 10 ** length - 1
        return str(low + secrets.randbelow(high - low + 1)).zfill(length)

    # Long codes: big-integer draw reduced modulo 10^length. Two extra bytes
    # keep the modulo bias below 2^-16.
    modulus = 10 ** length
    needed_bytes = math.ceil(length * math.log2(10) / 8) + 2
    while True:
        value = int.from_bytes(secrets.token_bytes(needed_bytes), "big") % modulus
        code = str(value).zfill(length)
        if allow_leading_zeros or code[0] != "0":
            return code


def generate_alphanumeric_otp(length: int = 6, allow_leading_zeros: bool = True) -> str:
    """Generate a secure random OTP over ``0-9A-Z``."""
    first_alphabet = ALPHANUMERIC if allow_leading_zeros else ALPHANUMERIC[1:]
    return secrets.choice(first_alphabet) + ''.join(
        secrets.choice(ALPHANUMERIC) for _ in range(length - 1)
    )


def generate_salt() -> bytes:
    """Generate a random salt for OTP hashing."""
    return secrets.token_bytes(SALT_BYTES)


def _hmac_hex(secret: Union[str, bytes], salt: bytes, otp: str) -> str:
    key = secret.encode() if isinstance(secret, str) else secret
    mac = hmac.new(key, digestmod=hashlib.sha256)
    mac.update(salt)
    mac.update(otp.encode())
    return mac.hexdigest()


def hash_otp(otp: str, secret: Union[str, bytes], salt: Optional[bytes] = None) -> str:
    """
    Hash an OTP with a keyed HMAC-SHA256 over ``salt || otp``.

    Args:
        otp: Plain OTP
        secret: Keyed-hash secret
        salt: Salt to use; a fresh one is generated when omitted

    Returns:
        ``"<salt hex>$<hmac hex>"``
    """
    salt = salt if salt is not None else generate_salt()
    return f"{salt.hex()}{DIGEST_DELIMITER}{_hmac_hex(secret, salt, otp)}"


def verify_otp_hash(otp: str, stored_hash: str, secret: Optional[Union[str, bytes]] = None) -> bool:
    """
    Verify an OTP against its stored digest.

    Uses constant-time comparison to prevent timing attacks. A malformed
    digest verifies as ``False``.

    Without a secret this falls back to an unsalted SHA-256 equality check.
    That path is reduced-security and only exists for digests written while
    no secret was available.

    Args:
        otp: User-provided OTP
        stored_hash: Digest produced by :func:`hash_otp`
        secret: Keyed-hash secret

    Returns:
        True if OTP matches
    """
    if not isinstance(otp, str) or not isinstance(stored_hash, str):
        return False

    # Lone surrogates cannot be encoded and can never match a stored code
    try:
        otp.encode()
        stored_hash.encode()
    except UnicodeEncodeError:
        return False

    if not secret:
        logger.warning("OTP verified without hash secret, reduced-security mode")
        fallback = hashlib.sha256(otp.encode()).hexdigest()
        return hmac.compare_digest(fallback.encode(), stored_hash.encode())

    parts = stored_hash.split(DIGEST_DELIMITER)
    if len(parts) != 2:
        return False

    salt_hex, expected_hex = parts
    try:
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(expected_hex)
    except ValueError:
        return False

    computed = bytes.fromhex(_hmac_hex(secret, salt, otp))
    if len(computed) != len(expected):
        return False

    return hmac.compare_digest(computed, expected)


def mask_identifier(identifier: str) -> str:
    """
    Mask an identifier for logging.

    ``alice@example.com`` becomes ``al***@example.com`` and
    ``+14155551234`` becomes ``+1***1234``.
    """
    if "@" in identifier:
        local, _, domain = identifier.partition("@")
        return f"{local[:2]}***@{domain}"
    if len(identifier) <= 4:
        return "***"
    return f"{identifier[:2]}***{identifier[-4:]}"
