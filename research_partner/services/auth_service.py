"""Authentication service: password hashing, JWT sessions and the OTP-gated flow.

Flow
----
  register  → unverified record + code (purpose "verification")
  verify-register-otp → is_verified = True, session token
  login     → password check + fresh code (purpose "login")
  verify-login-otp    → session token
  resend    → fresh code, purpose taken from the current is_verified flag

Every issuance overwrites the previous (code, expiry) pair, so only the most
recent code is ever accepted. Delivery is best effort: a failed send is
logged together with the code and never fails the request.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
import logging
import secrets
import string

from passlib.context import CryptContext
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from research_partner.core.config import settings
from research_partner.errors.exceptions import (
    EmailAlreadyRegisteredException,
    IdentityNotFoundException,
    UnverifiedIdentityException,
    InvalidCredentialsException,
    OTPNotIssuedException,
    OTPExpiredException,
    InvalidOTPException,
)
from research_partner.models.user import User, IdentityState, identity_state
from research_partner.schemas.auth_schemas import TokenData
from research_partner.services import credential_store
from research_partner.services.notification_service import NotificationSender
from research_partner.utils.email import PURPOSE_LOGIN, PURPOSE_VERIFICATION
from research_partner.utils.logger import log_auth_event

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a plain password against a hashed password"""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    return pwd_context.hash(password)


def default_avatar(email: str) -> str:
    return settings.DEFAULT_AVATAR_URL.format(seed=email)


# ── session tokens ────────────────────────────────────────────────────────────

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token (30 days unless *expires_delta* is given)
    """
    to_encode = data.copy()
    if expires_delta:
        expire = utc_now() + expires_delta
    else:
        expire = utc_now() + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: Optional[str]) -> Optional[TokenData]:
    """
    Decode and validate a JWT access token; None when invalid or expired
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info(f"JWT decode error: {str(e)}")
        return None

    user_id_str = payload.get("sub")
    if user_id_str is None:
        return None
    try:
        user_id = int(user_id_str)
    except (ValueError, TypeError):
        return None

    return TokenData(user_id=user_id)


def issue_session_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id)})


# ── OTP helpers ───────────────────────────────────────────────────────────────

def generate_otp() -> str:
    """Return a cryptographically random numeric OTP (6 digits by default)."""
    return "".join(secrets.choice(string.digits) for _ in range(settings.OTP_LENGTH))


def _new_challenge(now: datetime) -> Tuple[str, datetime]:
    return generate_otp(), now + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)


def _deliver_code(sender: NotificationSender, user: User, code: str, purpose: str) -> bool:
    """
    Hand the code to the notification sender. Never raises; on failure the
    code is written to the log so an operator can relay it.
    """
    try:
        sent = sender.send(user.email, code, purpose)
    except Exception as exc:
        logger.error(f"[OTP] Sender raised for {user.email}: {exc}", exc_info=True)
        sent = False

    if sent:
        log_auth_event("OTP SENT", user.email, user.id, detail=purpose)
    else:
        log_auth_event(
            "OTP DELIVERY FAILED",
            user.email,
            user.id,
            detail=f"purpose={purpose} code={code}",
            level=logging.WARNING,
        )
    return bool(sent)


# ── flow ──────────────────────────────────────────────────────────────────────

def register_user(
    db: Session,
    sender: NotificationSender,
    name: str,
    email: str,
    password: str,
    avatar: Optional[str] = None,
    now: Optional[datetime] = None,
) -> User:
    """
    Create (or overwrite an unverified) identity and issue a verification code

    Raises EmailAlreadyRegisteredException when a verified identity owns the email.
    """
    now = now or utc_now()
    email = credential_store.normalize_email(email)
    user = credential_store.get_user_by_email(db, email)

    state = identity_state(user, now)
    if state in (IdentityState.VERIFIED, IdentityState.PENDING_LOGIN):
        raise EmailAlreadyRegisteredException()

    code, expires_at = _new_challenge(now)
    hashed_password = get_password_hash(password)
    avatar = avatar or default_avatar(email)

    if user is None:
        user = credential_store.create_user(
            db,
            email=email,
            name=name,
            hashed_password=hashed_password,
            avatar=avatar,
            otp_code=code,
            otp_expires_at=expires_at,
        )
    else:
        user.name = name
        user.hashed_password = hashed_password
        user.avatar = avatar
        user.issue_challenge(code, expires_at)
        user = credential_store.save_user(db, user)

    _deliver_code(sender, user, code, PURPOSE_VERIFICATION)
    return user


def login_user(
    db: Session,
    sender: NotificationSender,
    email: str,
    password: str,
    now: Optional[datetime] = None,
) -> User:
    """
    Check credentials of a verified identity and issue a login code
    """
    now = now or utc_now()
    user = credential_store.get_user_by_email(db, email)

    state = identity_state(user, now)
    if state == IdentityState.UNREGISTERED:
        raise IdentityNotFoundException()
    if state == IdentityState.PENDING_VERIFICATION:
        raise UnverifiedIdentityException()

    if not verify_password(password, user.hashed_password):
        log_auth_event("LOGIN REJECTED", user.email, user.id, detail="bad password", level=logging.WARNING)
        raise InvalidCredentialsException()

    code, expires_at = _new_challenge(now)
    user.issue_challenge(code, expires_at)
    user = credential_store.save_user(db, user)

    _deliver_code(sender, user, code, PURPOSE_LOGIN)
    return user


def _check_otp(db: Session, email: str, otp: str, now: datetime) -> User:
    user = credential_store.get_user_by_email(db, email)
    if user is None:
        raise IdentityNotFoundException()

    if not user.has_challenge:
        raise OTPNotIssuedException()

    if user.challenge_expired(now):
        log_auth_event("OTP EXPIRED", user.email, user.id, level=logging.WARNING)
        raise OTPExpiredException()

    if not secrets.compare_digest(user.otp_code.encode(), otp.strip().encode()):
        log_auth_event("OTP MISMATCH", user.email, user.id, level=logging.WARNING)
        raise InvalidOTPException()

    return user


def _consume(user: User) -> None:
    # Codes stay valid until expiry or supersession unless single-use is on
    if settings.OTP_SINGLE_USE:
        user.clear_challenge()


def verify_registration_otp(
    db: Session,
    email: str,
    otp: str,
    now: Optional[datetime] = None,
) -> Tuple[User, str]:
    """
    Complete registration; returns the (now verified) user and a session token
    """
    now = now or utc_now()
    user = _check_otp(db, email, otp, now)

    user.is_verified = True
    _consume(user)
    user = credential_store.save_user(db, user)

    token = issue_session_token(user)
    log_auth_event("EMAIL VERIFIED", user.email, user.id)
    return user, token


def verify_login_otp(
    db: Session,
    email: str,
    otp: str,
    now: Optional[datetime] = None,
) -> Tuple[User, str]:
    """
    Complete a login; returns the user and a session token
    """
    now = now or utc_now()
    user = _check_otp(db, email, otp, now)

    user.last_login = now
    _consume(user)
    user = credential_store.save_user(db, user)

    token = issue_session_token(user)
    log_auth_event("LOGIN VERIFIED", user.email, user.id)
    return user, token


def resend_otp(
    db: Session,
    sender: NotificationSender,
    email: str,
    now: Optional[datetime] = None,
) -> User:
    """
    Replace the pending code with a fresh one and deliver it

    The email wording follows the identity's current is_verified flag.
    """
    now = now or utc_now()
    user = credential_store.get_user_by_email(db, email)
    if user is None:
        raise IdentityNotFoundException()

    code, expires_at = _new_challenge(now)
    user.issue_challenge(code, expires_at)
    user = credential_store.save_user(db, user)

    purpose = PURPOSE_LOGIN if user.is_verified else PURPOSE_VERIFICATION
    _deliver_code(sender, user, code, purpose)
    return user


# ── account ───────────────────────────────────────────────────────────────────

def update_profile(
    db: Session,
    user: User,
    name: Optional[str] = None,
    avatar: Optional[str] = None,
) -> User:
    """Update display name and/or avatar"""
    if name is not None:
        user.name = name
    if avatar is not None:
        user.avatar = avatar
    return credential_store.save_user(db, user)


def change_password(db: Session, user: User, old_password: str, new_password: str) -> User:
    """Replace the password after checking the current one"""
    if not verify_password(old_password, user.hashed_password):
        raise InvalidCredentialsException(detail="Incorrect old password")
    user.hashed_password = get_password_hash(new_password)
    user = credential_store.save_user(db, user)
    log_auth_event("PASSWORD CHANGED", user.email, user.id)
    return user
