from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_admin
from app.schemas.admin import CandidateResponse
from app.services.admin_service import AdminService, admin_service

router = APIRouter()


def get_admin_service() -> AdminService:
    return admin_service


@router.post("", response_model=CandidateResponse, status_code=status.HTTP_201_CREATED)
async def create_candidate(
    full_name: str = Form(...),
    position_id: str = Form(...),
    matric_number: Optional[str] = Form(None),
    nickname: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Add a candidate; an optional photo is stored in object storage"""
    image_bytes = await image.read() if image is not None else None
    return await service.create_candidate(
        db,
        full_name=full_name,
        position_id=position_id,
        matric_number=matric_number,
        nickname=nickname,
        image=image_bytes,
        image_content_type=image.content_type if image is not None else None,
    )


@router.get("", response_model=List[CandidateResponse])
async def list_candidates(
    position_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    return await service.list_candidates(db, position_id)


@router.delete("/{candidate_id}")
async def delete_candidate(
    candidate_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    await service.delete_candidate(db, candidate_id)
    return {"success": True, "message": "Candidate deleted"}
