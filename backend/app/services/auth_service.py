"""
Auth Service - Google sign-in

Creates the account on first sign-in and refreshes profile fields on later
ones. Accounts are matched by email, then linked to the Google subject id.
"""

from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthenticationError
from app.core.logging_config import logger
from app.core.security import create_access_token
from app.models.user import User
from app.modules.oauth.google_provider import GoogleOAuthProvider, google_provider


class AuthService:
    def __init__(self, provider: Optional[GoogleOAuthProvider] = None):
        self.provider = provider or google_provider

    async def google_sign_in(self, db: AsyncSession, token: str) -> Tuple[User, bool]:
        """Verify the Google ID token and upsert the account. Returns (user, is_new_user)."""
        info = self.provider.verify_id_token(token)
        if not info:
            logger.log_auth_event("google_signin", False, reason="invalid id token")
            raise AuthenticationError("Invalid Google token")

        email = info["email"].lower()
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        is_new_user = user is None

        if is_new_user:
            user = User(
                email=email,
                full_name=info.get("full_name") or None,
                google_id=info["google_id"],
                profile_image_url=info.get("profile_image_url") or None,
            )
            db.add(user)
        else:
            if not user.google_id:
                user.google_id = info["google_id"]
            # Name is owned by the verification flow once a matric number is set
            if info.get("full_name") and not user.matric_number:
                user.full_name = info["full_name"]
            if info.get("profile_image_url"):
                user.profile_image_url = info["profile_image_url"]

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.log_auth_event("google_signin", False, user_email=email, reason="account conflict")
            raise AuthenticationError("This Google account is linked to a different user")
        await db.refresh(user)

        logger.log_auth_event("google_signin", True, user_email=email, new_user=is_new_user)
        return user, is_new_user

    @staticmethod
    def create_token_for(user: User) -> str:
        return create_access_token({"sub": str(user.id), "email": user.email})


auth_service = AuthService()
