"""Pydantic schemas for request/response validation"""
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
    TokenData,
)

__all__ = [
    "UserCreate",
    "LoginRequest",
    "OTPVerifyRequest",
    "ResendOTPRequest",
    "OTPRequest",
    "SessionData",
    "SessionResponse",
    "UserResponse",
    "ProfileResponse",
    "ProfileUpdate",
    "PasswordChange",
    "MessageResponse",
    "TokenData",
]
