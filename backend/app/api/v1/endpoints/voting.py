from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.database import get_db
from app.core.rate_limiter import rate_limit
from app.models.position import Position
from app.modules.auth.dependencies import (
    AuthenticatedAccount,
    get_activated_account,
    get_current_account,
)
from app.modules.voting.eligibility import BallotRejection
from app.modules.voting.ledger import VoteLedger
from app.modules.voting.session_clock import get_open_session
from app.schemas.voting import (
    BallotCandidate,
    BallotPosition,
    CastVoteRequest,
    CastVoteResponse,
    MyVoteResponse,
    VotingStatusResponse,
)

router = APIRouter()


def _rejection_response(rejection: BallotRejection) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": rejection.message, "code": rejection.value},
    )


@router.get("/positions", response_model=List[BallotPosition])
async def get_ballot(
    db: AsyncSession = Depends(get_db),
    account: AuthenticatedAccount = Depends(get_activated_account),
):
    """Active positions with their active candidates, marked where already voted"""
    if await get_open_session(db) is None:
        return _rejection_response(BallotRejection.VOTING_CLOSED)

    result = await db.execute(
        select(Position)
        .where(Position.is_active == True)  # noqa: E712
        .options(selectinload(Position.candidates))
        .order_by(Position.created_at)
    )
    voted = await VoteLedger(db).voted_position_ids(account.id)

    return [
        BallotPosition(
            id=position.id,
            title=position.title,
            description=position.description,
            max_votes=position.max_votes,
            has_voted=position.id in voted,
            candidates=[
                BallotCandidate.model_validate(candidate)
                for candidate in position.candidates
                if candidate.is_active
            ],
        )
        for position in result.scalars().all()
    ]


@router.post("/cast-vote", response_model=CastVoteResponse)
@rate_limit(settings.CAST_VOTE_RATE_LIMIT)
async def cast_vote(
    request: Request,
    payload: CastVoteRequest,
    db: AsyncSession = Depends(get_db),
    account: AuthenticatedAccount = Depends(get_current_account),
):
    """Cast one ballot for one position"""
    check = await VoteLedger(db).cast_vote(account.id, payload.position_id, payload.candidate_id)
    if not check.accepted:
        return _rejection_response(check.rejection)
    return CastVoteResponse(message=check.message)


@router.get("/voting-status", response_model=VotingStatusResponse)
async def voting_status(db: AsyncSession = Depends(get_db)):
    """Whether ballots are accepted right now"""
    session = await get_open_session(db)
    if session is None:
        return VotingStatusResponse(is_active=False)
    return VotingStatusResponse(
        is_active=True,
        session_id=session.id,
        title=session.title,
        start_time=session.start_time,
        end_time=session.end_time,
    )


@router.get("/my-votes", response_model=List[MyVoteResponse])
async def my_votes(
    db: AsyncSession = Depends(get_db),
    account: AuthenticatedAccount = Depends(get_current_account),
):
    """The caller's recorded votes"""
    records = await VoteLedger(db).votes_for_user(account.id)
    return [
        MyVoteResponse(
            position_id=record.position_id,
            position_title=record.position_title,
            candidate_id=record.candidate_id,
            candidate_name=record.candidate_name,
            voted_at=record.voted_at,
        )
        for record in records
    ]
