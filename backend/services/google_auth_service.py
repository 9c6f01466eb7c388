"""
google_auth_service.py — Google Sign-In
Verifies a Google ID token with Google's tokeninfo endpoint and returns
the identity claims Spendly needs.
"""

import logging

import httpx

from config import GOOGLE_CLIENT_ID, GOOGLE_TOKENINFO_URL

logger = logging.getLogger(__name__)


class GoogleAuthError(ValueError):
    pass


def verify_google_credential(credential: str) -> dict:
    """Return {email, name, picture, sub} for a valid Google ID token."""
    try:
        with httpx.Client(timeout=10) as client:
            resp = client.get(GOOGLE_TOKENINFO_URL, params={"id_token": credential})
    except httpx.HTTPError as e:
        logger.error(f"Google tokeninfo request failed: {e}")
        raise GoogleAuthError("Could not verify Google credential") from e

    if resp.status_code != 200:
        raise GoogleAuthError("Invalid Google credential")

    claims = resp.json()
    if GOOGLE_CLIENT_ID and claims.get("aud") != GOOGLE_CLIENT_ID:
        raise GoogleAuthError("Google credential was issued for a different client")
    if not claims.get("email"):
        raise GoogleAuthError("Google credential has no email")
    if str(claims.get("email_verified", "true")).lower() != "true":
        raise GoogleAuthError("Google email address is not verified")

    return {
        "email": claims["email"].lower(),
        "name": (claims.get("name") or claims["email"].split("@")[0])[:50],
        "picture": claims.get("picture"),
        "sub": claims.get("sub"),
    }
