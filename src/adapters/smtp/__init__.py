"""Notification adapters - OTP delivery implementations."""

from .console import ConsoleNotificationGateway
from .mailer import SmtpNotificationGateway

__all__ = ["ConsoleNotificationGateway", "SmtpNotificationGateway"]
