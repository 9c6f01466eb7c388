"""
password_reset_service.py — Password Reset Tokens
Issues single-use, expiring reset tokens stored in the database and
redeems them for a new password.
"""

import logging
import secrets
from datetime import timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Session

from auth import hash_password
from config import RESET_TOKEN_EXPIRY_MINUTES
from constants import MIN_PASSWORD_LENGTH
from models.password_reset_token import PasswordResetToken
from models.user import User
from services.period_resolver import utc_now

logger = logging.getLogger(__name__)


class ResetTokenError(ValueError):
    """The token is unknown, already used, or expired."""


class PasswordResetService:
    @staticmethod
    def purge_stale(db: Session) -> int:
        """Delete used and expired tokens. Returns the number removed."""
        removed = db.query(PasswordResetToken).filter(
            or_(PasswordResetToken.used_at.isnot(None), PasswordResetToken.expires_at < utc_now())
        ).delete(synchronize_session=False)
        return removed

    @staticmethod
    def issue_token(db: Session, user: User) -> PasswordResetToken:
        try:
            PasswordResetService.purge_stale(db)
            record = PasswordResetToken(
                token=secrets.token_hex(32),
                user_id=user.id,
                email=user.email,
                expires_at=utc_now() + timedelta(minutes=RESET_TOKEN_EXPIRY_MINUTES),
            )
            db.add(record)
            db.commit()
            db.refresh(record)
            return record
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def reset_password(db: Session, token: str, new_password: str) -> User:
        """
        Redeem `token` and set the user's password.
        Raises ResetTokenError for bad tokens or passwords, LookupError if the user is gone.
        """
        if not token or not new_password:
            raise ResetTokenError("Token and new password are required")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ResetTokenError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        record = db.query(PasswordResetToken).filter_by(token=token).first()
        if record is None or record.used_at is not None:
            raise ResetTokenError("Invalid or expired reset token")
        if utc_now() > record.expires_at:
            db.delete(record)
            db.commit()
            raise ResetTokenError("Reset token has expired")

        user = db.query(User).filter_by(id=record.user_id).first()
        if user is None:
            raise LookupError("User not found")

        try:
            user.hashed_password = hash_password(new_password)
            record.used_at = utc_now()
            db.commit()
            logger.info(f"Password reset completed for user {user.id}")
            return user
        except Exception:
            db.rollback()
            raise
