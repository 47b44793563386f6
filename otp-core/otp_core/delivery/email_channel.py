"""
Email Delivery Channel
======================
Sends OTP codes over SMTP.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional
import structlog

from otp_core.otp.hashing import mask_identifier
from .base import DeliveryChannel, DeliveryResult
from .exceptions import DeliveryError

logger = structlog.get_logger(__name__)

SUBJECT = "Your One Time Password"

HTML_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; line-height: 1.5;">
    <h2>Your One Time Password</h2>
    <p><strong>{code}</strong></p>
    <p>This code will expire in <b>{minutes} minutes</b>. If you did not request this code, please ignore this email.</p>
    <hr />
    <p style="font-size: small;">If you have any questions, please contact us at <a href="mailto:{sender}">{sender}</a></p>
</div>
"""


class EmailChannel(DeliveryChannel):
    """
    SMTP email channel.

    Port 465 uses implicit TLS; any other port upgrades with STARTTLS.
    The blocking SMTP exchange runs in a worker thread.
    """

    name = "email"

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        expiry_minutes: int = 5,
        timeout: float = 30.0,
    ):
        super().__init__(expiry_minutes)
        if not host or not port:
            raise DeliveryError("Missing SMTP configuration", channel=self.name)
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.timeout = timeout

    def build_message(self, recipient: str, code: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = SUBJECT
        if self.sender:
            message["From"] = self.sender
        message["To"] = recipient
        message.set_content(self.render_text(code))
        message.add_alternative(
            HTML_TEMPLATE.format(code=code, minutes=self.expiry_minutes, sender=self.sender),
            subtype="html",
        )
        return message

    def _deliver(self, message: EmailMessage) -> None:
        if self.port == 465:
            server = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        with server:
            if self.port != 465:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(message)

    async def send(self, recipient: str, code: str) -> DeliveryResult:
        if "@" not in recipient:
            raise DeliveryError("Invalid email address", channel=self.name, recipient=recipient)

        message = self.build_message(recipient, code)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                "Email OTP delivery failed",
                recipient=mask_identifier(recipient),
                error=str(e),
            )
            return DeliveryResult(success=False, channel=self.name, error_message=str(e))

        logger.info("Email OTP sent", recipient=mask_identifier(recipient))
        return DeliveryResult(success=True, channel=self.name)
