from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.modules.auth.dependencies import get_current_admin
from app.modules.voting.ledger import VoteLedger
from app.schemas.admin import DetailedResultsResponse
from app.services.admin_service import admin_service

router = APIRouter()


@router.get("", response_model=Dict[str, Dict[str, int]])
async def get_results(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """{position_id: {candidate_id: votes}} for every position"""
    return await VoteLedger(db).counts_by_position()


@router.get("/detailed", response_model=DetailedResultsResponse)
async def get_detailed_results(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Results with position titles and candidate names, highest first"""
    return await admin_service.get_detailed_results(db)


@router.get("/{position_id}", response_model=Dict[str, int])
async def get_position_results(
    position_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return await VoteLedger(db).counts_by_candidate(position_id)
