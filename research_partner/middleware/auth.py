"""Authentication middleware and dependencies"""
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import Optional

from research_partner.core.config import settings
from research_partner.core.dependencies import get_db
from research_partner.services.auth_service import decode_access_token
from research_partner.services.credential_store import get_user_by_id
from research_partner.models.user import User
from research_partner.errors.exceptions import InvalidTokenException

# Tokens are only minted by the OTP verification endpoints
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/verify-login-otp",
    auto_error=False,
)


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from JWT token"""
    if not token:
        raise InvalidTokenException(detail="Not authorized, no token")

    token_data = decode_access_token(token)

    if token_data is None or token_data.user_id is None:
        raise InvalidTokenException(detail="Not authorized, token failed")

    user = get_user_by_id(db, user_id=token_data.user_id)

    if user is None:
        raise InvalidTokenException(detail="User not found")

    return user
