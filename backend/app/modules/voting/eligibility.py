"""
Eligibility & ballot validation.

Rejections are returned as values, checked in a fixed order and
short-circuiting on the first failure:

1. NOT_ACTIVATED      account missing or not fully verified
2. VOTING_CLOSED      no active session window contains now
3. ALREADY_VOTED      a vote exists for (account, position)
4. INVALID_CANDIDATE  candidate is not an active member of an active position
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.candidate import Candidate
from app.models.position import Position
from app.models.user import User
from app.models.vote import Vote
from app.modules.voting.session_clock import is_voting_open


class BallotRejection(str, enum.Enum):
    NOT_ACTIVATED = "NOT_ACTIVATED"
    VOTING_CLOSED = "VOTING_CLOSED"
    ALREADY_VOTED = "ALREADY_VOTED"
    INVALID_CANDIDATE = "INVALID_CANDIDATE"

    @property
    def message(self) -> str:
        return BALLOT_MESSAGES[self]


BALLOT_MESSAGES = {
    BallotRejection.NOT_ACTIVATED: "Your account must be fully verified before you can vote.",
    BallotRejection.VOTING_CLOSED: "Voting is not currently open.",
    BallotRejection.ALREADY_VOTED: "You have already voted for this position.",
    BallotRejection.INVALID_CANDIDATE: "The selected candidate is not valid for this position.",
}

VOTE_ACCEPTED_MESSAGE = "Vote cast successfully."


@dataclass(frozen=True)
class BallotCheck:
    accepted: bool
    rejection: Optional[BallotRejection] = None

    @classmethod
    def ok(cls) -> "BallotCheck":
        return cls(accepted=True)

    @classmethod
    def reject(cls, rejection: BallotRejection) -> "BallotCheck":
        return cls(accepted=False, rejection=rejection)

    @property
    def message(self) -> str:
        if self.accepted:
            return VOTE_ACCEPTED_MESSAGE
        return self.rejection.message

    @property
    def code(self) -> Optional[str]:
        return self.rejection.value if self.rejection else None


async def has_voted(db: AsyncSession, user_id: str, position_id: str) -> bool:
    result = await db.execute(
        select(Vote.id).where(Vote.user_id == user_id, Vote.position_id == position_id).limit(1)
    )
    return result.scalar_one_or_none() is not None


async def is_candidate_selectable(db: AsyncSession, position_id: str, candidate_id: str) -> bool:
    """Candidate exists, is active, and belongs to the given active position."""
    result = await db.execute(
        select(Candidate.id)
        .join(Position, Position.id == Candidate.position_id)
        .where(
            Candidate.id == candidate_id,
            Candidate.position_id == position_id,
            Candidate.is_active == True,  # noqa: E712
            Position.is_active == True,  # noqa: E712
        )
    )
    return result.scalar_one_or_none() is not None


async def validate_ballot(
    db: AsyncSession,
    user_id: str,
    position_id: str,
    candidate_id: str,
    now: Optional[datetime] = None,
) -> BallotCheck:
    """Run the ballot checks in order. Read-only."""
    user = await db.get(User, user_id)
    if user is None or not user.is_activated:
        return BallotCheck.reject(BallotRejection.NOT_ACTIVATED)

    if not await is_voting_open(db, now):
        return BallotCheck.reject(BallotRejection.VOTING_CLOSED)

    if await has_voted(db, user_id, position_id):
        return BallotCheck.reject(BallotRejection.ALREADY_VOTED)

    if not await is_candidate_selectable(db, position_id, candidate_id):
        return BallotCheck.reject(BallotRejection.INVALID_CANDIDATE)

    return BallotCheck.ok()
