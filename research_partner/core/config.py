"""Application configuration"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Database Configuration
    DATABASE_USER = os.getenv("DATABASE_USER", "postgres")
    DATABASE_PASSWORD = os.getenv("DATABASE_PASSWORD", "postgres")
    DATABASE_HOST = os.getenv("DATABASE_HOST", "localhost")
    DATABASE_PORT = os.getenv("DATABASE_PORT", "5432")
    DATABASE_NAME = os.getenv("DATABASE_NAME", "research_partner")

    @property
    def DATABASE_URL(self) -> str:
        """Full URL from the environment, or a PostgreSQL URL built from the parts"""
        url = os.getenv("DATABASE_URL")
        if url:
            return url
        return f"postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"

    # Logging Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE", "research_partner/logs/logs.txt")

    # Development/Production Settings
    ENVIRONMENT = os.getenv("ENVIRONMENT", "production")
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"

    # Project Metadata
    PROJECT_NAME = "AI Research Partner API"
    PROJECT_VERSION = "1.0.0"
    API_V1_STR = os.getenv("API_V1_STR", "/api/v1")

    # CORS: the single frontend origin allowed to call the API
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # Rate limiting (per client IP, applied to every route)
    RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_DEFAULT = os.getenv("RATE_LIMIT_DEFAULT", "100/15minutes")

    # JWT Authentication
    SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-this-in-production-min-32-chars")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", 30))

    # Password hashing
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 12))
    PASSWORD_MIN_LENGTH = 6

    # SMTP / Email configuration
    SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
    SMTP_USER = os.getenv("SMTP_USER", "")
    SMTP_PASS = os.getenv("SMTP_PASS", "")
    EMAIL_FROM = os.getenv("EMAIL_FROM", "noreply@airesearchpartner.app")
    EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", "AI Research Partner")

    # OTP
    OTP_EXPIRE_MINUTES = int(os.getenv("OTP_EXPIRE_MINUTES", 10))
    OTP_LENGTH = int(os.getenv("OTP_LENGTH", 6))
    # When true a verified code is cleared and cannot be replayed within its window
    OTP_SINGLE_USE = os.getenv("OTP_SINGLE_USE", "false").lower() == "true"

    # Avatar used when a registration does not supply one; {seed} is the email
    DEFAULT_AVATAR_URL = os.getenv(
        "DEFAULT_AVATAR_URL",
        "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}",
    )


settings = Settings()
