"""OTP delivery.

The auth flow only depends on ``send(email, code, purpose) -> bool``; any
object with that method can stand in for the SMTP sender (tests pass a
capturing stub through the ``get_notification_sender`` dependency).
"""
from typing import Protocol

from research_partner.utils.email import send_otp_email


class NotificationSender(Protocol):
    def send(self, email: str, code: str, purpose: str) -> bool:
        ...


class EmailNotificationSender:
    """Delivers codes through the SMTP transactional-email helper"""

    def send(self, email: str, code: str, purpose: str) -> bool:
        return send_otp_email(to=email, otp=code, purpose=purpose)
