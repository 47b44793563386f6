"""
OTP Exceptions
==============
Exception classes for OTP configuration and backend failures.

Verification failures are never raised; they are reported as ``False``.
"""

from typing import Optional


class OTPError(Exception):
    """Base exception for all OTP errors."""
    pass


class OTPConfigurationError(OTPError):
    """Raised when the OTP subsystem is misconfigured."""
    pass


class InvalidOTPConfigError(OTPConfigurationError):
    """Raised for an invalid length, charset, expiry or attempt limit."""
    pass


class MissingHashSecretError(OTPConfigurationError):
    """Raised when no hash secret is configured and ephemeral mode is off."""

    def __init__(self, message: str = "OTP hash secret is not configured"):
        super().__init__(message)


class BackendUnavailableError(OTPError):
    """
    Raised when the key-value backend cannot be reached or fails.

    Lets callers tell "could not check" apart from "checked, and it's wrong".
    """

    def __init__(self, message: str, backend: str = "unknown", operation: Optional[str] = None):
        self.message = message
        self.backend = backend
        self.operation = operation
        super().__init__(f"[{backend}] {message}" + (f" (op: {operation})" if operation else ""))
