"""
Delivery Channel Base
=====================
Interface for sending an issued code to its recipient.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import structlog

logger = structlog.get_logger(__name__)


@dataclass
class DeliveryResult:
    """Result of a delivery attempt."""
    success: bool
    channel: str
    provider_message_id: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None


class DeliveryChannel(ABC):
    """
    Abstract base class for OTP delivery channels.

    Called by the service after ``OTPStore.create_otp``; the store never
    calls a channel.
    """

    name: str = "base"

    def __init__(self, expiry_minutes: int = 5):
        self.expiry_minutes = expiry_minutes

    async def initialize(self) -> None:
        """Initialize the channel (e.g., create HTTP clients)."""
        logger.info("Delivery channel initialized", channel=self.name)

    async def close(self) -> None:
        """Clean up resources (e.g., close HTTP clients)."""
        logger.info("Delivery channel closed", channel=self.name)

    @abstractmethod
    async def send(self, recipient: str, code: str) -> DeliveryResult:
        """
        Send a code.

        Args:
            recipient: Email address, phone number, ...
            code: Plaintext OTP

        Returns:
            DeliveryResult; transport failures are reported, not raised

        Raises:
            DeliveryError: If the recipient is invalid for this channel
        """

    def render_text(self, code: str) -> str:
        return f"Your One Time Password is {code}. It expires in {self.expiry_minutes} minutes."
