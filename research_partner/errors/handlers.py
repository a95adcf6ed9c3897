"""Error handlers for the application"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from research_partner.errors.exceptions import BaseHTTPException
from research_partner.errors.response_codes import ErrorCode, code_for_status, error_response

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Render HTTP exceptions (custom and framework-raised) in the standard envelope
    """
    if isinstance(exc, BaseHTTPException):
        code = exc.response_code
    else:
        code = code_for_status(exc.status_code)

    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code} on {request.url}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code, message=str(exc.detail) if exc.detail else None),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle validation errors — malformed or missing fields are a bad request
    """
    errors = []
    for error in exc.errors():
        errors.append({
            "field": " -> ".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    logger.warning(f"Validation error on {request.url}: {errors}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response(ErrorCode.INVALID_INPUT, errors=errors)
    )


def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    """
    Handle requests over the per-client rate limit
    """
    client = request.client.host if request.client else "-"
    logger.warning(f"Rate limit exceeded on {request.url} for {client}: {exc.detail}")

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=error_response(ErrorCode.RATE_LIMIT_EXCEEDED)
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    """
    Handle SQLAlchemy database errors
    """
    logger.error(f"Database error on {request.url}: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response(
            ErrorCode.DATABASE_ERROR,
            message="An internal database error occurred. Please try again later."
        )
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle general exceptions
    """
    logger.error(f"Unhandled exception on {request.url}: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response(
            ErrorCode.INTERNAL_ERROR,
            message="An unexpected error occurred. Please try again later."
        )
    )
