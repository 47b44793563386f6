"""
Delivery Channel Registry
=========================
By-name lookup of delivery channels.
"""

from typing import Callable, Dict, List, Optional
import structlog

from otp_core.otp.hashing import mask_identifier
from .base import DeliveryChannel, DeliveryResult
from .email_channel import EmailChannel
from .exceptions import UnknownChannelError
from .sms_channel import SmsChannel

logger = structlog.get_logger(__name__)


class LogChannel(DeliveryChannel):
    """Development channel: logs that a code was issued, never the code itself."""

    name = "log"

    async def send(self, recipient: str, code: str) -> DeliveryResult:
        logger.info(
            "OTP delivery simulated",
            recipient=mask_identifier(recipient),
            code_length=len(code),
        )
        return DeliveryResult(success=True, channel=self.name)


ChannelFactory = Callable[..., DeliveryChannel]


class ChannelRegistry:
    """Maps channel names to factories taking ``OTPSettings``."""

    def __init__(self):
        self._factories: Dict[str, ChannelFactory] = {}

    def register(self, name: str, factory: ChannelFactory) -> None:
        self._factories[name] = factory

    def names(self) -> List[str]:
        return sorted(self._factories)

    def create(self, name: str, settings=None) -> DeliveryChannel:
        """
        Build the channel registered under ``name``.

        Raises:
            UnknownChannelError: If nothing is registered under ``name``
        """
        factory = self._factories.get(name)
        if factory is None:
            raise UnknownChannelError(f"Invalid OTP channel: {name}", channel=name)
        if settings is None:
            from otp_core.config import OTPSettings
            settings = OTPSettings.from_env()
        return factory(settings)


def _email_from_settings(settings) -> EmailChannel:
    return EmailChannel(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.mail_from,
        expiry_minutes=settings.expiry_minutes,
    )


def _sms_from_settings(settings) -> SmsChannel:
    return SmsChannel(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_from_number,
        expiry_minutes=settings.expiry_minutes,
    )


default_registry = ChannelRegistry()
default_registry.register("email", _email_from_settings)
default_registry.register("sms", _sms_from_settings)
default_registry.register("log", lambda settings: LogChannel(settings.expiry_minutes))


def create_channel(name: str, settings=None, registry: Optional[ChannelRegistry] = None) -> DeliveryChannel:
    """Create a delivery channel by name from the default registry."""
    return (registry or default_registry).create(name, settings)
