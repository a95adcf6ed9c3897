"""Authentication endpoints — email OTP registration and login"""
from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from research_partner.core.config import settings
from research_partner.core.rate_limit import limiter
from research_partner.core.dependencies import get_clock, get_db, get_notification_sender
from research_partner.services import auth_service
from research_partner.services.notification_service import NotificationSender
from research_partner.schemas.auth_schemas import (
    UserCreate,
    LoginRequest,
    OTPVerifyRequest,
    ResendOTPRequest,
    OTPRequest,
    SessionData,
    SessionResponse,
    UserResponse,
    ProfileResponse,
    ProfileUpdate,
    PasswordChange,
    MessageResponse,
)
from research_partner.middleware.auth import get_current_user
from research_partner.models.user import User
from research_partner.errors.response_codes import SuccessCode

router = APIRouter()


def _session_response(user: User, token: str, message: str) -> SessionResponse:
    return SessionResponse(
        message=message,
        data=SessionData(
            id=user.id,
            name=user.name,
            email=user.email,
            avatar=user.avatar,
            token=token,
        ),
    )


@router.post("/register", response_model=OTPRequest, status_code=status.HTTP_200_OK)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
def register(
    request: Request,
    user_data: UserCreate,
    db: Session = Depends(get_db),
    sender: NotificationSender = Depends(get_notification_sender),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    ## Register a new account (Step 1 of 2)

    **Role:** Public — no authentication required.

    Creates an **unverified** account (or overwrites a previous unverified
    attempt for the same email, password included) and emails a 6-digit
    code valid for 10 minutes.

    ### Required fields (JSON body)
    | Field    | Type   | Description                              |
    |----------|--------|------------------------------------------|
    | name     | string | Display name                             |
    | email    | string | Valid email — the code is sent here      |
    | password | string | Minimum 6 characters                     |
    | avatar   | string | Avatar URL (optional)                    |

    ### Response
    `{ "success": true, "message": "...", "email": "...", "requiresOTP": true }`

    ### Frontend integration
    1. HTTP 200 → navigate to the OTP screen with `{ email, type: "register" }`.
    2. HTTP 400 → "User already exists with this email".
    3. Next: **POST /auth/verify-register-otp**.
    """
    user = auth_service.register_user(
        db,
        sender,
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
        avatar=user_data.avatar,
        now=clock(),
    )
    return OTPRequest(
        message="Registration initiated! Please check your email for the verification code.",
        email=user.email,
    )


@router.post("/verify-register-otp", response_model=SessionResponse, status_code=status.HTTP_200_OK)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
def verify_register_otp(
    request: Request,
    body: OTPVerifyRequest,
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    ## Verify the registration code (Step 2 of 2)

    **Role:** Public — no authentication required.

    Marks the account verified and returns a session token so the client is
    logged in immediately.

    ### Response
    ```json
    { "success": true, "message": "...", "data": { "_id": 1, "name": "...", "email": "...", "avatar": "...", "token": "<JWT>" } }
    ```

    ### Errors
    - HTTP 404 → no account for this email.
    - HTTP 400 → no code issued / code expired / code invalid.
    """
    user, token = auth_service.verify_registration_otp(db, body.email, body.otp, now=clock())
    return _session_response(user, token, SuccessCode.EMAIL_VERIFIED.message)


@router.post("/login", response_model=OTPRequest, status_code=status.HTTP_200_OK)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
def login(
    request: Request,
    body: LoginRequest,
    db: Session = Depends(get_db),
    sender: NotificationSender = Depends(get_notification_sender),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    ## Login with email and password (Step 1 of 2)

    **Role:** Public — no authentication required.

    Checks the password of a verified account and emails a login code. Any
    earlier code for the account stops working.

    ### Errors
    - HTTP 404 → no account for this email.
    - HTTP 403 → account never completed email verification; register again.
    - HTTP 401 → "Invalid credentials".
    """
    user = auth_service.login_user(db, sender, email=body.email, password=body.password, now=clock())
    return OTPRequest(
        message="OTP sent to your email. Please verify to complete login.",
        email=user.email,
    )


@router.post("/verify-login-otp", response_model=SessionResponse, status_code=status.HTTP_200_OK)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
def verify_login_otp(
    request: Request,
    body: OTPVerifyRequest,
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    ## Verify the login code (Step 2 of 2)

    **Role:** Public — no authentication required.

    Same response shape as **/auth/verify-register-otp**. Attach the token to
    later requests as `Authorization: Bearer <token>`; it is valid for 30 days.
    """
    user, token = auth_service.verify_login_otp(db, body.email, body.otp, now=clock())
    return _session_response(user, token, SuccessCode.LOGIN_SUCCESSFUL.message)


@router.post("/resend-otp", response_model=OTPRequest, status_code=status.HTTP_200_OK)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
def resend_otp(
    request: Request,
    body: ResendOTPRequest,
    db: Session = Depends(get_db),
    sender: NotificationSender = Depends(get_notification_sender),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    ## Resend a code

    **Role:** Public — no authentication required.

    Issues a new code and invalidates the previous one. The email reads as a
    verification email while the account is unverified, otherwise as a login
    email.

    - HTTP 404 → no account for this email.
    """
    user = auth_service.resend_otp(db, sender, email=body.email, now=clock())
    return OTPRequest(message="OTP resent successfully", email=user.email)


@router.get("/me", response_model=ProfileResponse)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
def get_current_user_info(request: Request, current_user: User = Depends(get_current_user)):
    """
    ## Get the current user's profile

    **Auth:** `Authorization: Bearer <token>` header required.

    - HTTP 401 → token missing, invalid or expired.
    """
    return ProfileResponse(
        message=SuccessCode.RETRIEVED.message,
        data=UserResponse.model_validate(current_user),
    )


@router.patch("/me", response_model=ProfileResponse)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
def update_current_user(
    request: Request,
    body: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    ## Update display name and/or avatar

    **Auth:** `Authorization: Bearer <token>` header required.

    Omitted fields are left unchanged. The email cannot be changed.
    """
    user = auth_service.update_profile(db, current_user, name=body.name, avatar=body.avatar)
    return ProfileResponse(
        message=SuccessCode.UPDATED.message,
        data=UserResponse.model_validate(user),
    )


@router.post("/change-password", response_model=MessageResponse)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
def change_password(
    request: Request,
    password_data: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    ## Change the current user's password

    **Auth:** `Authorization: Bearer <token>` header required.

    - HTTP 401 → "Incorrect old password".

    Existing session tokens stay valid until they expire.
    """
    auth_service.change_password(db, current_user, password_data.old_password, password_data.new_password)
    return MessageResponse(message=SuccessCode.PASSWORD_CHANGED.message)
