from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.rate_limiter import rate_limit
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.auth import GoogleSignInRequest, SignInResponse, UserResponse
from app.services.auth_service import AuthService, auth_service

router = APIRouter()


def get_auth_service() -> AuthService:
    return auth_service


@router.post("/google-signin", response_model=SignInResponse)
@rate_limit(settings.SIGNIN_RATE_LIMIT)
async def google_signin(
    request: Request,
    payload: GoogleSignInRequest,
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
):
    """Sign in with a Google ID token, creating the account on first use"""
    user, is_new_user = await service.google_sign_in(db, payload.id_token)
    return SignInResponse(
        access_token=service.create_token_for(user),
        user=UserResponse.model_validate(user),
        is_new_user=is_new_user,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user profile"""
    return current_user
