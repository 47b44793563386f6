"""
Delivery Exceptions
===================
Exception classes for OTP delivery channels.
"""

from typing import Optional


class DeliveryError(Exception):
    """Raised when a channel cannot attempt delivery (bad recipient, missing config)."""

    def __init__(self, message: str, channel: str = "unknown", recipient: Optional[str] = None):
        self.message = message
        self.channel = channel
        self.recipient = recipient
        super().__init__(f"[{channel}] {message}")


class UnknownChannelError(DeliveryError):
    """Raised when no channel is registered under the requested name."""
    pass
