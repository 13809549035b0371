from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_admin
from app.schemas.admin import PositionCreate, PositionResponse
from app.services.admin_service import admin_service

router = APIRouter()


@router.post("", response_model=PositionResponse, status_code=status.HTTP_201_CREATED)
async def create_position(
    payload: PositionCreate,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return await admin_service.create_position(db, payload)


@router.get("", response_model=List[PositionResponse])
async def list_positions(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return await admin_service.list_positions(db)


@router.delete("/{position_id}")
async def delete_position(
    position_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Delete a position and its candidates (409 once votes exist)"""
    await admin_service.delete_position(db, position_id)
    return {"success": True, "message": "Position deleted"}
