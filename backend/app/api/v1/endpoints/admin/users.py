from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_admin
from app.schemas.admin import AdminUserResponse
from app.services.admin_service import admin_service

router = APIRouter()


@router.get("", response_model=List[AdminUserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """All accounts with their verification flags"""
    return await admin_service.list_users(db)
