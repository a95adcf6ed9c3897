"""Error handling module"""
from research_partner.errors.exceptions import (
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    EmailAlreadyRegisteredException,
    IdentityNotFoundException,
    UnverifiedIdentityException,
    InvalidCredentialsException,
    InvalidTokenException,
    OTPNotIssuedException,
    OTPExpiredException,
    InvalidOTPException,
)
from research_partner.errors.response_codes import (
    SuccessCode,
    ErrorCode,
    error_response,
)

__all__ = [
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "EmailAlreadyRegisteredException",
    "IdentityNotFoundException",
    "UnverifiedIdentityException",
    "InvalidCredentialsException",
    "InvalidTokenException",
    "OTPNotIssuedException",
    "OTPExpiredException",
    "InvalidOTPException",
    "SuccessCode",
    "ErrorCode",
    "error_response",
]
