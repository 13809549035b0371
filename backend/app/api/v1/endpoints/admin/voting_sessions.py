from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import VotingSessionNotFoundError
from app.models.user import User
from app.modules.auth.dependencies import get_current_admin
from app.modules.voting.session_activator import end_session, start_session
from app.schemas.admin import (
    SessionChangeResponse,
    VotingSessionCreate,
    VotingSessionResponse,
)
from app.services.admin_service import admin_service

router = APIRouter()


@router.post("", response_model=VotingSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_voting_session(
    payload: VotingSessionCreate,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Create an inactive session"""
    return await admin_service.create_voting_session(db, payload, created_by_id=current_admin.id)


@router.get("", response_model=List[VotingSessionResponse])
async def list_voting_sessions(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return await admin_service.list_voting_sessions(db)


@router.post("/{session_id}/start", response_model=SessionChangeResponse)
async def start_voting_session(
    session_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Activate this session and deactivate every other one"""
    change = await start_session(db, session_id)
    if not change.ok:
        raise VotingSessionNotFoundError(session_id)
    return SessionChangeResponse(
        message="Voting session started",
        session=VotingSessionResponse.model_validate(change.session),
    )


@router.post("/{session_id}/end", response_model=SessionChangeResponse)
async def end_voting_session(
    session_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    change = await end_session(db, session_id)
    if not change.ok:
        raise VotingSessionNotFoundError(session_id)
    return SessionChangeResponse(
        message="Voting session ended",
        session=VotingSessionResponse.model_validate(change.session),
    )
