"""User model — one durable credential record per registered email"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func

from research_partner.db.base import Base


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive timestamps read back from backends without tz support"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class IdentityState(str, Enum):
    """Lifecycle of an identity, derived from its stored fields"""
    UNREGISTERED = "unregistered"
    PENDING_VERIFICATION = "pending_verification"
    VERIFIED = "verified"
    PENDING_LOGIN = "pending_login"


class User(Base):
    """
    Registered identity.

    ``otp_code`` and ``otp_expires_at`` form the pending challenge. They are
    only ever written together through :meth:`issue_challenge` and
    :meth:`clear_challenge`; issuing a new challenge replaces the old one.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    avatar = Column(String(1024), nullable=True)

    is_verified = Column(Boolean, default=False, nullable=False)

    otp_code = Column(String(12), nullable=True)
    otp_expires_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)
    last_login = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', verified={self.is_verified})>"

    # ── pending challenge ─────────────────────────────────────
    def issue_challenge(self, code: str, expires_at: datetime) -> None:
        self.otp_code = code
        self.otp_expires_at = expires_at

    def clear_challenge(self) -> None:
        self.otp_code = None
        self.otp_expires_at = None

    @property
    def has_challenge(self) -> bool:
        return bool(self.otp_code) and self.otp_expires_at is not None

    def challenge_expired(self, now: datetime) -> bool:
        """True once ``now`` has reached the expiry; a missing challenge counts as expired"""
        if not self.has_challenge:
            return True
        return now >= as_utc(self.otp_expires_at)
    # ───────────────────────────────────────────────────────────


def identity_state(user: Optional[User], now: datetime) -> IdentityState:
    """Compute the lifecycle state of *user* at *now*"""
    if user is None:
        return IdentityState.UNREGISTERED
    if not user.is_verified:
        return IdentityState.PENDING_VERIFICATION
    if not user.challenge_expired(now):
        return IdentityState.PENDING_LOGIN
    return IdentityState.VERIFIED
