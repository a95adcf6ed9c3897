"""
HTTP Response Codes and Messages
Centralized response handling for consistent API responses
"""
from typing import Any, Dict, Optional
from fastapi import status


class ResponseCode:
    """HTTP Response Code Container"""
    def __init__(self, code: int, message: str, status_code: int):
        self.code = code
        self.message = message
        self.status_code = status_code


class SuccessCode:
    """Success Response Codes (2xx)"""

    RETRIEVED = ResponseCode(
        code=2001,
        message="Data retrieved successfully",
        status_code=status.HTTP_200_OK
    )

    UPDATED = ResponseCode(
        code=2002,
        message="Resource updated successfully",
        status_code=status.HTTP_200_OK
    )

    EMAIL_VERIFIED = ResponseCode(
        code=2005,
        message="Email verified successfully",
        status_code=status.HTTP_200_OK
    )

    LOGIN_SUCCESSFUL = ResponseCode(
        code=2006,
        message="Login successful",
        status_code=status.HTTP_200_OK
    )

    PASSWORD_CHANGED = ResponseCode(
        code=2007,
        message="Password changed successfully",
        status_code=status.HTTP_200_OK
    )


class ErrorCode:
    """Error Response Codes (4xx, 5xx)"""

    # 400 - Bad Request
    BAD_REQUEST = ResponseCode(
        code=400,
        message="Bad request",
        status_code=status.HTTP_400_BAD_REQUEST
    )

    INVALID_INPUT = ResponseCode(
        code=4001,
        message="Invalid input provided",
        status_code=status.HTTP_400_BAD_REQUEST
    )

    EMAIL_EXISTS = ResponseCode(
        code=4006,
        message="User already exists with this email",
        status_code=status.HTTP_400_BAD_REQUEST
    )

    OTP_NOT_ISSUED = ResponseCode(
        code=4007,
        message="No OTP found for this email. Please request a new one.",
        status_code=status.HTTP_400_BAD_REQUEST
    )

    OTP_EXPIRED = ResponseCode(
        code=4008,
        message="OTP has expired. Please request a new one.",
        status_code=status.HTTP_400_BAD_REQUEST
    )

    INVALID_OTP = ResponseCode(
        code=4009,
        message="Invalid OTP code",
        status_code=status.HTTP_400_BAD_REQUEST
    )

    # 401 - Unauthorized
    UNAUTHORIZED = ResponseCode(
        code=401,
        message="Authentication required",
        status_code=status.HTTP_401_UNAUTHORIZED
    )

    INVALID_CREDENTIALS = ResponseCode(
        code=4011,
        message="Invalid credentials",
        status_code=status.HTTP_401_UNAUTHORIZED
    )

    INVALID_TOKEN = ResponseCode(
        code=4013,
        message="Invalid authentication token",
        status_code=status.HTTP_401_UNAUTHORIZED
    )

    # 403 - Forbidden
    FORBIDDEN = ResponseCode(
        code=403,
        message="Access forbidden",
        status_code=status.HTTP_403_FORBIDDEN
    )

    ACCOUNT_UNVERIFIED = ResponseCode(
        code=4034,
        message="Email not verified. Please register again to receive a new verification code.",
        status_code=status.HTTP_403_FORBIDDEN
    )

    # 404 - Not Found
    NOT_FOUND = ResponseCode(
        code=404,
        message="Resource not found",
        status_code=status.HTTP_404_NOT_FOUND
    )

    USER_NOT_FOUND = ResponseCode(
        code=4041,
        message="No account found with this email. Please register first.",
        status_code=status.HTTP_404_NOT_FOUND
    )

    # 409 - Conflict
    CONFLICT = ResponseCode(
        code=409,
        message="Resource conflict",
        status_code=status.HTTP_409_CONFLICT
    )

    # 429 - Too Many Requests
    RATE_LIMIT_EXCEEDED = ResponseCode(
        code=429,
        message="Too many requests, please try again later.",
        status_code=status.HTTP_429_TOO_MANY_REQUESTS
    )

    # 500 - Internal Server Error
    INTERNAL_ERROR = ResponseCode(
        code=500,
        message="Internal server error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )

    DATABASE_ERROR = ResponseCode(
        code=5001,
        message="Database operation failed",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
    )

    # 503 - Service Unavailable
    SERVICE_UNAVAILABLE = ResponseCode(
        code=503,
        message="Service temporarily unavailable",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE
    )


_CODES_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.BAD_REQUEST,
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorCode.CONFLICT,
    status.HTTP_429_TOO_MANY_REQUESTS: ErrorCode.RATE_LIMIT_EXCEEDED,
    status.HTTP_503_SERVICE_UNAVAILABLE: ErrorCode.SERVICE_UNAVAILABLE,
}


def code_for_status(status_code: int) -> ResponseCode:
    """Generic error code for a bare HTTP status"""
    return _CODES_BY_STATUS.get(status_code, ErrorCode.INTERNAL_ERROR)


def error_response(
    code: ResponseCode = ErrorCode.INTERNAL_ERROR,
    message: Optional[str] = None,
    errors: Optional[Any] = None
) -> Dict[str, Any]:
    """
    Create a standardized error response

    Args:
        code: ResponseCode object
        message: Optional custom message
        errors: Optional detailed error information

    Returns:
        Standardized error response dictionary
    """
    response = {
        "success": False,
        "code": code.code,
        "message": message or code.message
    }

    if errors:
        response["errors"] = errors

    return response
