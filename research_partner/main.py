"""Main FastAPI application"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from research_partner.core.config import settings
from research_partner.core.rate_limit import limiter
from research_partner.utils.logger import setup_file_logging
from research_partner.api.v1.api import api_router
from research_partner.db.init_db import init_db
from research_partner.errors.handlers import (
    http_exception_handler,
    validation_exception_handler,
    rate_limit_exception_handler,
    sqlalchemy_exception_handler,
    general_exception_handler
)

setup_file_logging(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database and log application startup / shutdown"""
    try:
        init_db()
        logger.warning(f"{settings.PROJECT_NAME} STARTED - Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        logger.warning(f"{settings.PROJECT_NAME} STARTED - Database initialization failed, but API is running")
    yield
    logger.warning(f"{settings.PROJECT_NAME} SHUTDOWN")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="AI Research Partner — email OTP authentication and session issuance",
    version=settings.PROJECT_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

app.state.limiter = limiter

app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/", tags=["Health"])
async def root():
    """Service banner"""
    return {"message": settings.PROJECT_NAME, "version": settings.PROJECT_VERSION}
