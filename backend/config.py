import os
from dotenv import load_dotenv

load_dotenv()

# --- Runtime ---
APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- JWT Configuration ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "720"))  # 30 days

# --- Database ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/spendly.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Web client ---
CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:5173")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", CLIENT_URL).split(",") if o.strip()]
FRONTEND_DIST = os.getenv("FRONTEND_DIST", "")

# --- Password reset ---
RESET_TOKEN_EXPIRY_MINUTES = int(os.getenv("RESET_TOKEN_EXPIRY_MINUTES", "60"))

# --- Google Sign-In ---
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")
GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"

# --- Email (password reset links) ---
EMAIL_SERVICE = os.getenv("EMAIL_SERVICE", "")  # "gmail" or empty for generic SMTP
EMAIL_USER = os.getenv("EMAIL_USER", "")
EMAIL_PASSWORD = os.getenv("EMAIL_PASSWORD", "")
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")


def is_production() -> bool:
    return APP_ENV.lower() == "production"
