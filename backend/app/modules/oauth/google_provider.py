"""Google Sign-In provider for authentication."""

from typing import Optional, Dict, Any
from google.oauth2 import id_token
from google.auth.transport import requests as google_requests

from app.core.config import settings
from app.core.logging_config import logger


class GoogleOAuthProvider:
    """Verify ID tokens issued to the frontend's Google Sign-In button."""

    VALID_ISSUERS = ("accounts.google.com", "https://accounts.google.com")

    def __init__(self):
        self.client_id = settings.GOOGLE_CLIENT_ID

    def verify_id_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Verify a Google ID token.

        Returns the identity claims the sign-in flow needs, or None when the
        token is invalid, expired, issued for another client or by another
        issuer.
        """
        try:
            idinfo = id_token.verify_oauth2_token(
                token,
                google_requests.Request(),
                self.client_id
            )

            if idinfo["iss"] not in self.VALID_ISSUERS:
                logger.warning("[GoogleOAuth] Invalid token issuer")
                return None

            if not idinfo.get("email"):
                logger.warning("[GoogleOAuth] Token carries no email claim")
                return None

            return {
                "google_id": idinfo["sub"],
                "email": idinfo["email"],
                "email_verified": idinfo.get("email_verified", False),
                "full_name": idinfo.get("name", ""),
                "profile_image_url": idinfo.get("picture", ""),
            }
        except ValueError as e:
            logger.error(f"[GoogleOAuth] Invalid ID token: {e}")
            return None


google_provider = GoogleOAuthProvider()
