"""
email_service.py — Outgoing Mail
Sends the password reset email over SMTP. When no mail account is
configured the send is skipped so local development keeps working.
"""

import logging
import smtplib
from email.message import EmailMessage

from config import (
    CLIENT_URL,
    EMAIL_PASSWORD,
    EMAIL_SERVICE,
    EMAIL_USER,
    RESET_TOKEN_EXPIRY_MINUTES,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USER,
)

logger = logging.getLogger(__name__)

_PLACEHOLDER_USER = "your-email@gmail.com"


class EmailDeliveryError(RuntimeError):
    pass


def is_configured() -> bool:
    return bool(EMAIL_USER and EMAIL_PASSWORD and EMAIL_USER != _PLACEHOLDER_USER)


def _smtp_settings() -> tuple[str, int, str, str]:
    if EMAIL_SERVICE == "gmail":
        return "smtp.gmail.com", 587, EMAIL_USER, EMAIL_PASSWORD
    return SMTP_HOST, SMTP_PORT, SMTP_USER or EMAIL_USER, SMTP_PASSWORD or EMAIL_PASSWORD


def reset_link(token: str) -> str:
    return f"{CLIENT_URL.rstrip('/')}/reset-password/{token}"


def build_reset_message(email: str, token: str, user_name: str | None = None) -> EmailMessage:
    link = reset_link(token)
    msg = EmailMessage()
    msg["From"] = f'"Spendly Support" <{EMAIL_USER}>'
    msg["To"] = email
    msg["Subject"] = "Reset Your Spendly Password"
    msg.set_content(
        f"Hi {user_name or 'there'},\n\n"
        "We received a request to reset your Spendly password. "
        f"Open the link below to choose a new one:\n\n{link}\n\n"
        f"This link will expire in {RESET_TOKEN_EXPIRY_MINUTES} minutes.\n\n"
        "If you didn't request this, ignore this email and your password will stay the same.\n\n"
        "Thanks,\nThe Spendly Team\n"
    )
    msg.add_alternative(
        f"""\
<html>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <h2>Password Reset Request</h2>
    <p>Hi {user_name or 'there'},</p>
    <p>We received a request to reset your Spendly password.</p>
    <p><a href="{link}">Reset Password</a></p>
    <p style="word-break: break-all;">{link}</p>
    <p><strong>This link will expire in {RESET_TOKEN_EXPIRY_MINUTES} minutes.</strong></p>
    <p>Thanks,<br>The Spendly Team</p>
  </body>
</html>
""",
        subtype="html",
    )
    return msg


def send_password_reset_email(email: str, token: str, user_name: str | None = None) -> bool:
    if not is_configured():
        logger.info("Email not configured - skipping password reset email")
        return False

    host, port, user, password = _smtp_settings()
    msg = build_reset_message(email, token, user_name)
    try:
        with smtplib.SMTP(host, port, timeout=10) as smtp:
            smtp.starttls()
            smtp.login(user, password)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Error sending password reset email: {e}")
        raise EmailDeliveryError("Failed to send password reset email") from e

    logger.info(f"Password reset email sent to {email}")
    return True
