"""FastAPI dependencies"""
from datetime import datetime
from typing import Callable, Generator

from research_partner.db.session import SessionLocal
from research_partner.services.auth_service import utc_now
from research_partner.services.notification_service import EmailNotificationSender, NotificationSender

_email_sender = EmailNotificationSender()


def get_db() -> Generator:
    """
    Database session dependency
    Yields a database session and ensures it's closed after use
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_notification_sender() -> NotificationSender:
    """OTP sender used by the auth endpoints"""
    return _email_sender


def get_clock() -> Callable[[], datetime]:
    """Source of the current UTC time for OTP expiry checks"""
    return utc_now
