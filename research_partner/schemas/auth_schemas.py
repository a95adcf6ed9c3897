"""Authentication and user schemas"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from research_partner.core.config import settings


def _normalize_email(v: str) -> str:
    return v.strip().lower() if isinstance(v, str) else v


def _validate_password(v: str) -> str:
    if len(v) < settings.PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long")
    return v


class EmailBody(BaseModel):
    """Base schema for requests keyed by email"""
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class UserCreate(EmailBody):
    """Schema for a registration request"""
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., max_length=100)
    avatar: Optional[str] = Field(None, max_length=1024)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please provide a name")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password(v)


class LoginRequest(EmailBody):
    """Schema for login request"""
    password: str = Field(..., min_length=1)


class OTPVerifyRequest(EmailBody):
    """Schema for submitting an emailed code"""
    otp: str = Field(..., min_length=1, max_length=32)


class ResendOTPRequest(EmailBody):
    """Schema for requesting a fresh code"""


class OTPRequest(BaseModel):
    """Acknowledgement that a code was issued; the code itself is never returned"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    email: EmailStr
    requires_otp: bool = Field(True, alias="requiresOTP")


class SessionData(BaseModel):
    """Profile fields a client needs to hold a session"""
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(..., alias="_id")
    name: str
    email: EmailStr
    avatar: Optional[str] = None
    token: str


class SessionResponse(BaseModel):
    """Successful OTP verification"""
    success: bool = True
    message: str
    data: SessionData


class UserResponse(BaseModel):
    """Schema for user profile response"""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int = Field(..., alias="_id")
    name: str
    email: EmailStr
    avatar: Optional[str] = None
    is_verified: bool
    created_at: datetime
    last_login: Optional[datetime] = None


class ProfileResponse(BaseModel):
    """Envelope for profile reads and updates"""
    success: bool = True
    message: str
    data: UserResponse


class ProfileUpdate(BaseModel):
    """Mutable profile fields"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    avatar: Optional[str] = Field(None, max_length=1024)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


class PasswordChange(BaseModel):
    """Schema for changing password"""
    old_password: str
    new_password: str = Field(..., max_length=100)

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return _validate_password(v)


class MessageResponse(BaseModel):
    """Plain acknowledgement"""
    success: bool = True
    message: str


class TokenData(BaseModel):
    """Token data schema for JWT payload"""
    user_id: Optional[int] = None
