"""Custom exceptions for error handling"""
from fastapi import HTTPException

from research_partner.errors.response_codes import ErrorCode, ResponseCode


class BaseHTTPException(HTTPException):
    """Base exception class for all custom HTTP exceptions"""
    response_code: ResponseCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, detail: str = None, headers: dict = None):
        super().__init__(
            status_code=self.response_code.status_code,
            detail=detail or self.response_code.message,
            headers=headers
        )


class BadRequestException(BaseHTTPException):
    """400 Bad Request"""
    response_code = ErrorCode.BAD_REQUEST


class UnauthorizedException(BaseHTTPException):
    """401 Unauthorized"""
    response_code = ErrorCode.UNAUTHORIZED

    def __init__(self, detail: str = None):
        super().__init__(
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenException(BaseHTTPException):
    """403 Forbidden"""
    response_code = ErrorCode.FORBIDDEN


class NotFoundException(BaseHTTPException):
    """404 Not Found"""
    response_code = ErrorCode.NOT_FOUND


# ── Authentication flow outcomes ──────────────────────────────────────────────

class EmailAlreadyRegisteredException(BadRequestException):
    """A verified account already owns the email"""
    response_code = ErrorCode.EMAIL_EXISTS


class IdentityNotFoundException(NotFoundException):
    """No account exists for the email"""
    response_code = ErrorCode.USER_NOT_FOUND


class UnverifiedIdentityException(ForbiddenException):
    """Login attempted before registration was verified"""
    response_code = ErrorCode.ACCOUNT_UNVERIFIED


class InvalidCredentialsException(UnauthorizedException):
    """Password did not match"""
    response_code = ErrorCode.INVALID_CREDENTIALS


class InvalidTokenException(UnauthorizedException):
    """Bearer token missing, malformed, expired, or bound to no account"""
    response_code = ErrorCode.INVALID_TOKEN


class OTPNotIssuedException(BadRequestException):
    """No pending challenge for the identity"""
    response_code = ErrorCode.OTP_NOT_ISSUED


class OTPExpiredException(BadRequestException):
    """Pending challenge is past its expiry"""
    response_code = ErrorCode.OTP_EXPIRED


class InvalidOTPException(BadRequestException):
    """Supplied code does not match the pending challenge"""
    response_code = ErrorCode.INVALID_OTP
