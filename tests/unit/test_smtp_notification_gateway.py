"""
Unit tests for SmtpNotificationGateway.

smtplib.SMTP is replaced with a mock; tests verify the message, the
session sequence, and that every transport error becomes DeliveryFailure.
"""

import smtplib
import socket
from unittest.mock import MagicMock, patch

import pytest

from src.adapters.smtp.mailer import SmtpNotificationGateway
from src.domain.exceptions import DeliveryFailure


def make_gateway(**overrides: object) -> SmtpNotificationGateway:
    options = {
        "host": "smtp.example.com",
        "port": 587,
        "sender": "no-reply@example.com",
        "username": "mailer",
        "password": "mailer-password",
        "use_tls": True,
    }
    options.update(overrides)
    return SmtpNotificationGateway(**options)


@pytest.fixture
def smtp_cls():
    with patch("src.adapters.smtp.mailer.smtplib.SMTP") as smtp_cls:
        server = MagicMock()
        smtp_cls.return_value.__enter__.return_value = server
        yield smtp_cls


class TestSend:
    def test_connects_with_timeout(self, smtp_cls) -> None:
        make_gateway().send_otp("a@x.com", "123456", timeout=2.5)

        smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=2.5)

    def test_session_sequence(self, smtp_cls) -> None:
        make_gateway().send_otp("a@x.com", "123456", timeout=2.5)

        server = smtp_cls.return_value.__enter__.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "mailer-password")
        server.send_message.assert_called_once()

    def test_message_content(self, smtp_cls) -> None:
        make_gateway().send_otp("a@x.com", "004217", timeout=2.5)

        server = smtp_cls.return_value.__enter__.return_value
        message = server.send_message.call_args[0][0]
        assert message["To"] == "a@x.com"
        assert message["From"] == "no-reply@example.com"
        assert "004217" in message.get_content()

    def test_no_tls_no_login(self, smtp_cls) -> None:
        make_gateway(use_tls=False, username="").send_otp("a@x.com", "123456", timeout=1.0)

        server = smtp_cls.return_value.__enter__.return_value
        server.starttls.assert_not_called()
        server.login.assert_not_called()
        server.send_message.assert_called_once()


class TestFailures:
    @pytest.mark.parametrize(
        "error",
        [
            smtplib.SMTPAuthenticationError(535, b"bad credentials"),
            smtplib.SMTPRecipientsRefused({"a@x.com": (550, b"no such user")}),
            smtplib.SMTPServerDisconnected("gone"),
        ],
    )
    def test_protocol_errors_become_delivery_failure(self, smtp_cls, error: Exception) -> None:
        server = smtp_cls.return_value.__enter__.return_value
        server.send_message.side_effect = error

        with pytest.raises(DeliveryFailure):
            make_gateway().send_otp("a@x.com", "123456", timeout=1.0)

    def test_connection_refused_becomes_delivery_failure(self, smtp_cls) -> None:
        smtp_cls.side_effect = ConnectionRefusedError()

        with pytest.raises(DeliveryFailure):
            make_gateway().send_otp("a@x.com", "123456", timeout=1.0)

    def test_timeout_becomes_delivery_failure(self, smtp_cls) -> None:
        smtp_cls.side_effect = socket.timeout("timed out")

        with pytest.raises(DeliveryFailure):
            make_gateway().send_otp("a@x.com", "123456", timeout=0.1)

    def test_failure_does_not_log_code(self, smtp_cls, caplog: pytest.LogCaptureFixture) -> None:
        smtp_cls.side_effect = ConnectionRefusedError()

        with pytest.raises(DeliveryFailure):
            make_gateway().send_otp("a@x.com", "987123", timeout=1.0)

        assert "987123" not in caplog.text
