"""
OTP Delivery Channels
=====================
Email, SMS and development channels for sending issued codes.
"""

from .base import DeliveryChannel, DeliveryResult
from .exceptions import DeliveryError, UnknownChannelError
from .email_channel import EmailChannel
from .sms_channel import SmsChannel
from .registry import ChannelRegistry, LogChannel, create_channel, default_registry

__all__ = [
    "DeliveryChannel",
    "DeliveryResult",
    "DeliveryError",
    "UnknownChannelError",
    "EmailChannel",
    "SmsChannel",
    "LogChannel",
    "ChannelRegistry",
    "create_channel",
    "default_registry",
]
