"""
SMS Delivery Channel
====================
Sends OTP codes through the Twilio Messages API.
"""

import re
import httpx
from typing import Optional
from base64 import b64encode
import structlog

from otp_core.otp.hashing import mask_identifier
from .base import DeliveryChannel, DeliveryResult
from .exceptions import DeliveryError

logger = structlog.get_logger(__name__)

E164_PATTERN = re.compile(r"^\+[1-9]\d{7,14}$")


class SmsChannel(DeliveryChannel):
    """Twilio SMS channel."""

    name = "sms"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        expiry_minutes: int = 5,
        base_url: str = "https://api.twilio.com/2010-04-01",
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(expiry_minutes)
        if not account_sid or not auth_token or not from_number:
            raise DeliveryError("Missing Twilio configuration", channel=self.name)
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.messages_url = f"{base_url}/Accounts/{account_sid}/Messages.json"
        self._client = client

    async def initialize(self) -> None:
        """Create HTTP client with auth."""
        if self._client is None:
            auth = b64encode(f"{self.account_sid}:{self.auth_token}".encode()).decode()
            self._client = httpx.AsyncClient(
                headers={"Authorization": f"Basic {auth}"},
                timeout=30.0,
            )
        await super().initialize()

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        await super().close()

    async def send(self, recipient: str, code: str) -> DeliveryResult:
        if not E164_PATTERN.match(recipient):
            raise DeliveryError("Invalid E.164 phone number", channel=self.name, recipient=recipient)
        if not self._client:
            raise DeliveryError("Channel not initialized", channel=self.name)

        try:
            response = await self._client.post(
                self.messages_url,
                data={"To": recipient, "From": self.from_number, "Body": self.render_text(code)},
            )
        except httpx.HTTPError as e:
            logger.error("SMS OTP delivery failed", recipient=mask_identifier(recipient), error=str(e))
            return DeliveryResult(success=False, channel=self.name, error_message=str(e))

        if response.status_code == 201:
            data = response.json()
            logger.info("SMS OTP sent", recipient=mask_identifier(recipient), sid=data.get("sid"))
            return DeliveryResult(success=True, channel=self.name, provider_message_id=data.get("sid"))

        try:
            error_data = response.json()
        except ValueError:
            error_data = {}
        logger.error(
            "SMS OTP rejected by provider",
            recipient=mask_identifier(recipient),
            status_code=response.status_code,
        )
        return DeliveryResult(
            success=False,
            channel=self.name,
            error_code=str(error_data.get("code", response.status_code)),
            error_message=error_data.get("message", "Unknown error"),
        )
