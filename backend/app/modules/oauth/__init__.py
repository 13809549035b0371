"""OAuth providers module for Google authentication."""

from .google_provider import GoogleOAuthProvider, google_provider

__all__ = ["GoogleOAuthProvider", "google_provider"]
