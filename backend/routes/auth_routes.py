# ---------- routes/auth_routes.py ----------
"""
Auth routes: registration, login, profile, account deletion, password
reset and Google sign-in.
"""
import json
import logging
import re
import secrets
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import AfterValidator, BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from auth import hash_password, verify_password, create_token, get_current_user
from config import is_production
from constants import DEFAULT_PREFERENCES, MIN_PASSWORD_LENGTH
from database import get_db
from models.budget import Budget
from models.expense import Expense
from models.password_reset_token import PasswordResetToken
from models.user import User
from services.email_service import EmailDeliveryError, reset_link, send_password_reset_email
from services.google_auth_service import GoogleAuthError, verify_google_credential
from services.password_reset_service import PasswordResetService, ResetTokenError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_GENERIC_RESET_MESSAGE = "If an account with that email exists, a password reset link has been sent."


def _normalize_email(value: str) -> str:
    value = value.strip().lower()
    if not _EMAIL_RE.match(value):
        raise ValueError("Please provide a valid email")
    return value


Email = Annotated[str, AfterValidator(_normalize_email)]


# ── Pydantic schemas ──────────────────────────────────────────────
class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    email: Email
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.strip().lower()


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[Email] = None
    avatar: Optional[str] = None
    preferences: Optional[dict] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    newPassword: str


class GoogleSignInRequest(BaseModel):
    credential: str
    clientId: Optional[str] = None


# ── Helpers ───────────────────────────────────────────────────────
def user_to_dict(u: User) -> dict:
    prefs = dict(DEFAULT_PREFERENCES)
    if u.preferences:
        prefs.update(json.loads(u.preferences))
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "avatar": u.avatar,
        "preferences": prefs,
        "createdAt": u.created_at.isoformat() if u.created_at else None,
    }


def _auth_response(u: User) -> dict:
    token = create_token({"user_id": u.id, "email": u.email})
    return {"success": True, "token": token, "user": user_to_dict(u)}


# ── Routes ────────────────────────────────────────────────────────
@router.post("/register", status_code=201)
async def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and return a session token."""
    try:
        if db.query(User).filter_by(email=body.email).first():
            raise HTTPException(status_code=400, detail="User already exists with this email")

        user = User(name=body.name, email=body.email, hashed_password=hash_password(body.password))
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Registered user {user.id}")
        return _auth_response(user)
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        logger.exception("Register error")
        raise HTTPException(status_code=500, detail="Server error")


@router.post("/login")
async def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate with email + password."""
    try:
        user = db.query(User).filter_by(email=body.email).first()
        if not user or not verify_password(body.password, user.hashed_password):
            logger.info(f"Failed login for {body.email}")
            raise HTTPException(status_code=401, detail="Invalid email or password")
        return _auth_response(user)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Login error")
        raise HTTPException(status_code=500, detail="Server error")


@router.get("/me")
async def me(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Return the current user's profile."""
    user = db.query(User).filter_by(id=user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True, "data": user_to_dict(user)}


@router.put("/profile")
async def update_profile(body: ProfileUpdate, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        user = db.query(User).filter_by(id=user_id).first()
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        data = body.model_dump(exclude_unset=True)
        if data.get("email") and data["email"] != user.email:
            taken = db.query(User).filter(User.email == data["email"], User.id != user_id).first()
            if taken:
                raise HTTPException(status_code=400, detail="Email is already in use")
            user.email = data["email"]
        if data.get("name"):
            user.name = data["name"]
        if "avatar" in data:
            user.avatar = data["avatar"]
        if data.get("preferences") is not None:
            prefs = json.loads(user.preferences) if user.preferences else {}
            prefs.update(data["preferences"])
            user.preferences = json.dumps(prefs)

        db.commit()
        db.refresh(user)
        return {"success": True, "message": "Profile updated successfully", "data": user_to_dict(user)}
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        logger.exception("Update profile error")
        raise HTTPException(status_code=500, detail="Server error")


@router.delete("/account")
async def delete_account(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete the user together with their expenses, budgets and reset tokens."""
    try:
        for model in (Expense, Budget, PasswordResetToken):
            db.query(model).filter(model.user_id == user_id).delete(synchronize_session=False)
        db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
        db.commit()
        logger.info(f"Deleted account {user_id}")
        return {"success": True, "message": "Account deleted successfully"}
    except Exception:
        db.rollback()
        logger.exception("Delete account error")
        raise HTTPException(status_code=500, detail="Server error")


@router.post("/forgot-password")
async def forgot_password(body: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """Issue a reset token. The response never reveals whether the email exists."""
    try:
        user = db.query(User).filter_by(email=body.email.strip().lower()).first()
        if not user:
            return {"success": True, "message": _GENERIC_RESET_MESSAGE}

        record = PasswordResetService.issue_token(db, user)
        send_password_reset_email(user.email, record.token, user.name)

        response = {"success": True, "message": _GENERIC_RESET_MESSAGE}
        if not is_production():
            # Lets the SPA finish the flow locally without a mail server
            response["resetLink"] = reset_link(record.token)
            response["resetToken"] = record.token
        return response
    except EmailDeliveryError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception:
        logger.exception("Forgot password error")
        raise HTTPException(status_code=500, detail="Server error")


@router.post("/reset-password")
async def reset_password(body: ResetPasswordRequest, db: Session = Depends(get_db)):
    try:
        PasswordResetService.reset_password(db, body.token, body.newPassword)
        return {"success": True, "message": "Password has been reset successfully"}
    except ResetTokenError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        logger.exception("Reset password error")
        raise HTTPException(status_code=500, detail="Server error")


@router.post("/google")
async def google_sign_in(body: GoogleSignInRequest, db: Session = Depends(get_db)):
    """Sign in (or sign up) with a Google ID token."""
    if not body.credential:
        raise HTTPException(status_code=400, detail="Google credential is required")
    try:
        identity = verify_google_credential(body.credential)
    except GoogleAuthError as e:
        raise HTTPException(status_code=401, detail=str(e))

    try:
        user = db.query(User).filter_by(email=identity["email"]).first()
        if not user:
            user = User(
                name=identity["name"],
                email=identity["email"],
                # Google accounts never log in with a password; make one nobody knows
                hashed_password=hash_password(secrets.token_hex(32)),
                google_id=identity["sub"],
                avatar=identity["picture"],
                preferences=json.dumps(DEFAULT_PREFERENCES),
            )
            db.add(user)
        elif not user.google_id:
            user.google_id = identity["sub"]
            if identity["picture"]:
                user.avatar = identity["picture"]
        db.commit()
        db.refresh(user)
        return _auth_response(user)
    except Exception:
        db.rollback()
        logger.exception("Google sign in error")
        raise HTTPException(status_code=500, detail="Server error during Google sign in")
