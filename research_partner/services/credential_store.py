"""CRUD operations for user credential records"""
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from research_partner.errors.exceptions import EmailAlreadyRegisteredException
from research_partner.models.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """
    Get user by email (case-insensitive)
    """
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    """
    Get user by ID
    """
    return db.query(User).filter(User.id == user_id).first()


def create_user(
    db: Session,
    email: str,
    name: str,
    hashed_password: str,
    avatar: Optional[str] = None,
    is_verified: bool = False,
    otp_code: Optional[str] = None,
    otp_expires_at: Optional[datetime] = None,
) -> User:
    """
    Insert a new user record, optionally with its first pending challenge

    A concurrent insert of the same email surfaces as a conflict.
    """
    db_user = User(
        email=normalize_email(email),
        name=name,
        hashed_password=hashed_password,
        avatar=avatar,
        is_verified=is_verified,
    )
    if otp_code is not None and otp_expires_at is not None:
        db_user.issue_challenge(otp_code, otp_expires_at)
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise EmailAlreadyRegisteredException()
    db.refresh(db_user)
    return db_user


def save_user(db: Session, user: User) -> User:
    """
    Persist whatever fields were mutated on *user*
    """
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def delete_user_by_id(db: Session, user_id: int) -> bool:
    """
    Hard-delete a user by ID

    Returns:
        bool: True if a record was deleted, False otherwise
    """
    user = get_user_by_id(db, user_id)
    if user is None:
        return False
    db.delete(user)
    db.commit()
    return True
