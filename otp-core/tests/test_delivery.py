"""
Unit Tests for Delivery Channels
================================
"""

import smtplib
from unittest.mock import patch

import httpx
import pytest

from otp_core.config import OTPSettings
from otp_core.delivery import (
    ChannelRegistry,
    DeliveryError,
    EmailChannel,
    LogChannel,
    SmsChannel,
    UnknownChannelError,
    create_channel,
)


def email_channel(port=587):
    return EmailChannel(
        host="smtp.example.com",
        port=port,
        username="mailer",
        password="pw",
        sender="no-reply@example.com",
    )


def sms_channel(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SmsChannel(
        account_sid="AC123",
        auth_token="token",
        from_number="+15550000000",
        client=client,
    )


class TestEmailChannel:
    """Tests for SMTP delivery."""

    def test_requires_host(self):
        with pytest.raises(DeliveryError):
            EmailChannel(host=None)

    async def test_rejects_invalid_address(self):
        with pytest.raises(DeliveryError):
            await email_channel().send("not-an-email", "123456")

    def test_message_contents(self):
        message = email_channel().build_message("alice@example.com", "123456")

        assert message["Subject"] == "Your One Time Password"
        assert message["To"] == "alice@example.com"
        assert message["From"] == "no-reply@example.com"
        assert "123456" in message.get_body(("plain",)).get_content()
        assert "5 minutes" in message.get_body(("html",)).get_content()

    async def test_send_uses_starttls(self):
        with patch("otp_core.delivery.email_channel.smtplib.SMTP") as smtp:
            result = await email_channel().send("alice@example.com", "123456")

        assert result.success is True
        server = smtp.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "pw")
        server.send_message.assert_called_once()

    async def test_port_465_uses_implicit_tls(self):
        with patch("otp_core.delivery.email_channel.smtplib.SMTP_SSL") as smtp_ssl:
            result = await email_channel(port=465).send("alice@example.com", "123456")

        assert result.success is True
        smtp_ssl.return_value.starttls.assert_not_called()

    async def test_smtp_failure_is_reported(self):
        with patch("otp_core.delivery.email_channel.smtplib.SMTP") as smtp:
            smtp.return_value.send_message.side_effect = smtplib.SMTPException("rejected")
            result = await email_channel().send("alice@example.com", "123456")

        assert result.success is False
        assert "rejected" in result.error_message


class TestSmsChannel:
    """Tests for Twilio delivery."""

    async def test_send_success(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(201, json={"sid": "SM1", "status": "queued"})

        result = await sms_channel(handler).send("+14155551234", "123456")

        assert result.success is True
        assert result.provider_message_id == "SM1"
        assert requests[0].url.path == "/2010-04-01/Accounts/AC123/Messages.json"
        assert b"123456" in requests[0].content

    async def test_provider_rejection(self):
        def handler(request):
            return httpx.Response(400, json={"code": 21211, "message": "Invalid 'To' number"})

        result = await sms_channel(handler).send("+14155551234", "123456")

        assert result.success is False
        assert result.error_code == "21211"

    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable")

        result = await sms_channel(handler).send("+14155551234", "123456")
        assert result.success is False

    async def test_rejects_non_e164(self):
        with pytest.raises(DeliveryError):
            await sms_channel(lambda r: httpx.Response(201)).send("4155551234", "123456")

    async def test_requires_initialize_without_client(self):
        channel = SmsChannel(account_sid="AC1", auth_token="t", from_number="+15550000000")
        with pytest.raises(DeliveryError):
            await channel.send("+14155551234", "123456")

        await channel.initialize()
        await channel.close()


class TestRegistry:
    """Tests for by-name channel selection."""

    def test_unknown_channel(self):
        with pytest.raises(UnknownChannelError):
            create_channel("telegram", OTPSettings())

    def test_creates_email_from_settings(self):
        settings = OTPSettings(smtp_host="smtp.example.com", smtp_port=465, mail_from="a@example.com")
        channel = create_channel("email", settings)

        assert isinstance(channel, EmailChannel)
        assert channel.port == 465

    def test_email_without_host_fails(self):
        with pytest.raises(DeliveryError):
            create_channel("email", OTPSettings())

    def test_creates_sms_from_settings(self):
        settings = OTPSettings(
            twilio_account_sid="AC1", twilio_auth_token="t", twilio_from_number="+15550000000"
        )
        assert isinstance(create_channel("sms", settings), SmsChannel)

    async def test_log_channel_never_fails(self):
        channel = create_channel("log", OTPSettings())

        assert isinstance(channel, LogChannel)
        assert (await channel.send("alice@example.com", "123456")).success is True

    def test_custom_registry(self):
        registry = ChannelRegistry()
        registry.register("log", lambda settings: LogChannel())

        assert registry.names() == ["log"]
        with pytest.raises(UnknownChannelError):
            registry.create("email", OTPSettings())
