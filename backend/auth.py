from datetime import datetime, timedelta, timezone
import logging
import uuid

from fastapi import Depends, Request, HTTPException, status
from jose import jwt, JWTError
from sqlalchemy.orm import Session
import bcrypt

from config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRY_HOURS
from database import get_db
from models.user import User

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""
    # Ensure it doesn't exceed 72 bytes to prevent bcrypt ValueError
    pw_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(pw_bytes, bcrypt.gensalt())
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain-text password against a bcrypt hash."""
    try:
        pw_bytes = plain_password.encode('utf-8')[:72]
        hash_bytes = hashed_password.encode('utf-8')
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except ValueError as e:
        logger.warning(f"Bcrypt verification error: {e}")
        return False


def create_token(data: dict) -> str:
    """Create a JWT token with an expiry claim and a unique JTI."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(hours=JWT_EXPIRY_HOURS)
    jti = str(uuid.uuid4())
    to_encode.update({"exp": expire, "jti": jti})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> dict | None:
    """Decode and verify a JWT token. Returns the payload or None on failure."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return payload
    except JWTError:
        return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(request: Request, db: Session = Depends(get_db)) -> int:
    """
    FastAPI dependency — extracts the Bearer token from the Authorization
    header, verifies it, and returns the user_id.
    Raises HTTP 401 if the token is missing, invalid, or the user is gone.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise _unauthorized("Missing or invalid Authorization header")

    token = auth_header.split(" ", 1)[1]
    payload = verify_token(token)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    user_id = payload.get("user_id")
    if user_id is None or payload.get("jti") is None:
        raise _unauthorized("Token payload missing required claims")

    # Deleted accounts keep their old tokens; refuse them
    if db.query(User.id).filter(User.id == user_id).first() is None:
        raise _unauthorized("User no longer exists")

    return user_id
