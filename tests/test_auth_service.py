import logging
from datetime import timedelta

import pytest

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
from research_partner.models.user import IdentityState, as_utc, identity_state
from research_partner.services import auth_service, credential_store


def register(db, sender, now, email="a@x.com", password="secret1", name="Ada"):
    return auth_service.register_user(db, sender, name=name, email=email, password=password, now=now)


def registered_and_verified(db, sender, now, **kwargs):
    user = register(db, sender, now, **kwargs)
    auth_service.verify_registration_otp(db, user.email, sender.last_code, now=now)
    return user


class TestRegister:
    def test_creates_unverified_identity_and_delivers_code(self, db, sender, now):
        user = register(db, sender, now)

        assert user.is_verified is False
        assert len(user.otp_code) == 6 and user.otp_code.isdigit()
        assert as_utc(user.otp_expires_at) == now + timedelta(minutes=10)
        assert sender.sent == [("a@x.com", user.otp_code, "verification")]
        assert identity_state(user, now) == IdentityState.PENDING_VERIFICATION

    def test_normalizes_email_and_defaults_avatar(self, db, sender, now):
        user = register(db, sender, now, email="  Ada@X.COM ")

        assert user.email == "ada@x.com"
        assert user.avatar == "https://api.dicebear.com/7.x/avataaars/svg?seed=ada@x.com"

    def test_password_is_hashed(self, db, sender, now):
        user = register(db, sender, now)

        assert user.hashed_password != "secret1"
        assert auth_service.verify_password("secret1", user.hashed_password)

    def test_verified_email_conflicts(self, db, sender, now):
        registered_and_verified(db, sender, now)

        with pytest.raises(EmailAlreadyRegisteredException):
            register(db, sender, now + timedelta(days=2))

    def test_conflict_while_login_pending(self, db, sender, now):
        registered_and_verified(db, sender, now)
        auth_service.login_user(db, sender, "a@x.com", "secret1", now=now)

        with pytest.raises(EmailAlreadyRegisteredException):
            register(db, sender, now)

    def test_unverified_identity_is_overwritten(self, db, sender, now, otp_codes):
        first = register(db, sender, now, password="oldpass1", name="First")
        assert first.otp_code == "123456"

        second = register(db, sender, now + timedelta(minutes=1), password="newpass1", name="Second")

        assert second.id == first.id
        assert second.name == "Second"
        assert second.otp_code == "654321"
        assert auth_service.verify_password("newpass1", second.hashed_password)
        assert not auth_service.verify_password("oldpass1", second.hashed_password)
        with pytest.raises(InvalidOTPException):
            auth_service.verify_registration_otp(db, "a@x.com", "123456", now=now + timedelta(minutes=1))


class TestLogin:
    def test_unknown_email(self, db, sender, now):
        with pytest.raises(IdentityNotFoundException):
            auth_service.login_user(db, sender, "nobody@x.com", "secret1", now=now)

    def test_unverified_identity_is_rejected_without_issuing_a_code(self, db, sender, now):
        user = register(db, sender, now)
        code_before = user.otp_code
        sent_before = len(sender.sent)

        with pytest.raises(UnverifiedIdentityException):
            auth_service.login_user(db, sender, "a@x.com", "secret1", now=now)

        db.refresh(user)
        assert user.otp_code == code_before
        assert len(sender.sent) == sent_before

    def test_wrong_password(self, db, sender, now):
        registered_and_verified(db, sender, now)

        with pytest.raises(InvalidCredentialsException):
            auth_service.login_user(db, sender, "a@x.com", "wrong-password", now=now)

    def test_issues_login_code(self, db, sender, now):
        registered_and_verified(db, sender, now)
        later = now + timedelta(hours=1)

        user = auth_service.login_user(db, sender, "A@x.com", "secret1", now=later)

        assert sender.last_purpose == "login"
        assert user.otp_code == sender.last_code
        assert as_utc(user.otp_expires_at) == later + timedelta(minutes=10)
        assert identity_state(user, later) == IdentityState.PENDING_LOGIN
        assert identity_state(user, later + timedelta(minutes=10)) == IdentityState.VERIFIED

    def test_second_issuance_invalidates_first(self, db, sender, now, otp_codes):
        registered_and_verified(db, sender, now)
        auth_service.login_user(db, sender, "a@x.com", "secret1", now=now)
        auth_service.login_user(db, sender, "a@x.com", "secret1", now=now)
        assert [code for _, code, _ in sender.sent] == ["123456", "654321", "246810"]

        with pytest.raises(InvalidOTPException):
            auth_service.verify_login_otp(db, "a@x.com", "654321", now=now)
        user, token = auth_service.verify_login_otp(db, "a@x.com", "246810", now=now)
        assert token


class TestVerify:
    def test_registration_scenario(self, db, sender, now):
        register(db, sender, now)

        user, token = auth_service.verify_registration_otp(db, "a@x.com", sender.last_code, now=now)

        assert user.is_verified is True
        assert token
        assert auth_service.decode_access_token(token).user_id == user.id

    def test_unknown_email(self, db, now):
        with pytest.raises(IdentityNotFoundException):
            auth_service.verify_registration_otp(db, "nobody@x.com", "123456", now=now)

    def test_no_code_issued(self, db, now):
        credential_store.create_user(
            db, email="b@x.com", name="B", hashed_password=auth_service.get_password_hash("secret1"),
        )

        with pytest.raises(OTPNotIssuedException):
            auth_service.verify_login_otp(db, "b@x.com", "123456", now=now)

    def test_expired_regardless_of_code(self, db, sender, now):
        register(db, sender, now)
        code = sender.last_code
        late = now + timedelta(minutes=11)

        with pytest.raises(OTPExpiredException):
            auth_service.verify_registration_otp(db, "a@x.com", code, now=late)
        with pytest.raises(OTPExpiredException):
            auth_service.verify_registration_otp(db, "a@x.com", "not-it", now=late)

    def test_expiry_boundary(self, db, sender, now):
        register(db, sender, now)
        code = sender.last_code

        with pytest.raises(OTPExpiredException):
            auth_service.verify_registration_otp(db, "a@x.com", code, now=now + timedelta(minutes=10))

        user, _ = auth_service.verify_registration_otp(
            db, "a@x.com", code, now=now + timedelta(minutes=9, seconds=59)
        )
        assert user.is_verified

    def test_wrong_code(self, db, sender, now, otp_codes):
        register(db, sender, now)

        with pytest.raises(InvalidOTPException):
            auth_service.verify_registration_otp(db, "a@x.com", "000000", now=now)

    def test_non_ascii_code_is_just_wrong(self, db, sender, now, otp_codes):
        register(db, sender, now)

        with pytest.raises(InvalidOTPException):
            auth_service.verify_registration_otp(db, "a@x.com", "１２３４５６", now=now)

    def test_code_is_compared_trimmed(self, db, sender, now):
        register(db, sender, now)

        user, _ = auth_service.verify_registration_otp(db, "a@x.com", f"  {sender.last_code}\n", now=now)
        assert user.is_verified

    def test_repeat_verification_is_idempotent(self, db, sender, now):
        register(db, sender, now)
        code = sender.last_code

        first_user, first_token = auth_service.verify_registration_otp(db, "a@x.com", code, now=now)
        second_user, second_token = auth_service.verify_registration_otp(
            db, "a@x.com", code, now=now + timedelta(minutes=1)
        )

        assert first_user.id == second_user.id
        assert second_user.is_verified is True
        assert second_user.otp_code == code
        assert auth_service.decode_access_token(second_token).user_id == second_user.id

    def test_single_use_codes_are_cleared(self, db, sender, now, monkeypatch):
        monkeypatch.setattr(settings, "OTP_SINGLE_USE", True)
        register(db, sender, now)
        code = sender.last_code

        user, _ = auth_service.verify_registration_otp(db, "a@x.com", code, now=now)
        assert user.otp_code is None and user.otp_expires_at is None

        with pytest.raises(OTPNotIssuedException):
            auth_service.verify_registration_otp(db, "a@x.com", code, now=now)

    def test_login_verification_stamps_last_login(self, db, sender, now):
        registered_and_verified(db, sender, now)
        auth_service.login_user(db, sender, "a@x.com", "secret1", now=now)

        user, _ = auth_service.verify_login_otp(db, "a@x.com", sender.last_code, now=now)

        assert as_utc(user.last_login) == now


class TestResend:
    def test_unknown_email(self, db, sender, now):
        with pytest.raises(IdentityNotFoundException):
            auth_service.resend_otp(db, sender, "nobody@x.com", now=now)

    def test_replaces_code_for_unverified_identity(self, db, sender, now, otp_codes):
        register(db, sender, now)
        auth_service.resend_otp(db, sender, "a@x.com", now=now)

        assert sender.sent[-1] == ("a@x.com", "654321", "verification")
        with pytest.raises(InvalidOTPException):
            auth_service.verify_registration_otp(db, "a@x.com", "123456", now=now)
        user, _ = auth_service.verify_registration_otp(db, "a@x.com", "654321", now=now)
        assert user.is_verified

    def test_purpose_follows_current_verified_flag(self, db, sender, now):
        registered_and_verified(db, sender, now)

        auth_service.resend_otp(db, sender, "a@x.com", now=now)

        assert sender.last_purpose == "login"

    def test_resend_extends_expiry(self, db, sender, now):
        register(db, sender, now)
        later = now + timedelta(minutes=8)

        user = auth_service.resend_otp(db, sender, "a@x.com", now=later)

        assert as_utc(user.otp_expires_at) == later + timedelta(minutes=10)


class TestDelivery:
    def test_failed_delivery_does_not_fail_registration(self, db, sender, now, caplog):
        sender.fail = True

        with caplog.at_level(logging.WARNING, logger="auth_events"):
            user = register(db, sender, now)

        assert user.otp_code == sender.last_code
        assert any(user.otp_code in record.getMessage() for record in caplog.records)

    def test_raising_sender_is_swallowed(self, db, sender, now, caplog):
        sender.raise_error = True

        with caplog.at_level(logging.WARNING):
            user = register(db, sender, now)

        assert user.otp_code
        assert any("OTP DELIVERY FAILED" in record.getMessage() for record in caplog.records)


class TestTokens:
    def test_round_trip(self):
        token = auth_service.create_access_token({"sub": "42"})

        assert auth_service.decode_access_token(token).user_id == 42

    def test_default_lifetime_is_thirty_days(self):
        from jose import jwt

        token = auth_service.create_access_token({"sub": "1"})
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        issued_for = payload["exp"] - auth_service.utc_now().timestamp()

        assert timedelta(days=29, hours=23) < timedelta(seconds=issued_for) <= timedelta(days=30)

    def test_expired_token(self):
        token = auth_service.create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-5))

        assert auth_service.decode_access_token(token) is None

    @pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
    def test_garbage(self, token):
        assert auth_service.decode_access_token(token) is None

    def test_non_numeric_subject(self):
        token = auth_service.create_access_token({"sub": "abc"})

        assert auth_service.decode_access_token(token) is None


class TestAccount:
    def test_update_profile(self, db, sender, now):
        user = registered_and_verified(db, sender, now)

        user = auth_service.update_profile(db, user, name="Ada L.")

        assert user.name == "Ada L."
        assert user.avatar.startswith("https://api.dicebear.com/")

    def test_change_password(self, db, sender, now):
        user = registered_and_verified(db, sender, now)

        with pytest.raises(InvalidCredentialsException):
            auth_service.change_password(db, user, "nope", "another1")

        auth_service.change_password(db, user, "secret1", "another1")
        auth_service.login_user(db, sender, "a@x.com", "another1", now=now)
        assert sender.last_purpose == "login"


def test_generate_otp_shape():
    codes = {auth_service.generate_otp() for _ in range(50)}

    assert all(len(c) == 6 and c.isdigit() for c in codes)
    assert len(codes) > 1
