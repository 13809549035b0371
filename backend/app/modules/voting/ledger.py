"""
Vote Ledger
===========

Append-only store of votes plus the tallies read from it.

The unique constraint uq_votes_user_position is the real guard against two
concurrent casts for the same (account, position): the validator's
ALREADY_VOTED pre-check can race, the insert cannot. A constraint violation
is reported back to the caller as ALREADY_VOTED.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PositionNotFoundError
from app.core.logging_config import logger
from app.models.candidate import Candidate
from app.models.position import Position
from app.models.vote import Vote
from app.modules.voting.eligibility import (
    BallotCheck,
    BallotRejection,
    has_voted,
    validate_ballot,
)
from app.modules.voting.session_clock import utcnow

# PostgreSQL reports the constraint name, SQLite the constrained columns
BALLOT_CONSTRAINT = "uq_votes_user_position"
SQLITE_BALLOT_COLUMNS = "votes.user_id, votes.position_id"


def is_duplicate_ballot(error: IntegrityError) -> bool:
    """True when the violated constraint is the one-vote-per-position guard"""
    message = str(error.orig)
    return BALLOT_CONSTRAINT in message or SQLITE_BALLOT_COLUMNS in message


@dataclass
class VoteRecord:
    position_id: str
    position_title: str
    candidate_id: str
    candidate_name: str
    voted_at: datetime


class VoteLedger:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def cast_vote(
        self,
        user_id: str,
        position_id: str,
        candidate_id: str,
        now: Optional[datetime] = None,
    ) -> BallotCheck:
        """Validate and record one ballot. Rejections are returned, not raised."""
        now = now or utcnow()
        check = await validate_ballot(self.db, user_id, position_id, candidate_id, now)
        if not check.accepted:
            logger.log_vote_event(user_id, position_id, False, reason=check.code)
            return check

        self.db.add(Vote(
            user_id=user_id,
            position_id=position_id,
            candidate_id=candidate_id,
            voted_at=now,
        ))
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if not is_duplicate_ballot(e):
                logger.error(f"Ballot insert failed for position {position_id}: {e.orig}")
                raise
            logger.log_vote_event(user_id, position_id, False, reason="ALREADY_VOTED (constraint)")
            return BallotCheck.reject(BallotRejection.ALREADY_VOTED)

        logger.log_vote_event(user_id, position_id, True)
        return check

    async def has_voted(self, user_id: str, position_id: str) -> bool:
        return await has_voted(self.db, user_id, position_id)

    async def voted_position_ids(self, user_id: str) -> set:
        result = await self.db.execute(select(Vote.position_id).where(Vote.user_id == user_id))
        return set(result.scalars().all())

    async def votes_for_user(self, user_id: str) -> List[VoteRecord]:
        result = await self.db.execute(
            select(Vote, Position.title, Candidate.full_name)
            .join(Position, Position.id == Vote.position_id)
            .join(Candidate, Candidate.id == Vote.candidate_id)
            .where(Vote.user_id == user_id)
            .order_by(Vote.voted_at)
        )
        return [
            VoteRecord(
                position_id=vote.position_id,
                position_title=title,
                candidate_id=vote.candidate_id,
                candidate_name=name,
                voted_at=vote.voted_at,
            )
            for vote, title, name in result.all()
        ]

    async def counts_by_candidate(self, position_id: str) -> Dict[str, int]:
        """Vote count per candidate of one position, zero-vote candidates included."""
        position = await self.db.get(Position, position_id)
        if position is None:
            raise PositionNotFoundError(position_id)

        candidates = await self.db.execute(
            select(Candidate.id).where(Candidate.position_id == position_id)
        )
        counts = {candidate_id: 0 for candidate_id in candidates.scalars().all()}

        grouped = await self.db.execute(
            select(Vote.candidate_id, func.count(Vote.id))
            .where(Vote.position_id == position_id)
            .group_by(Vote.candidate_id)
        )
        for candidate_id, count in grouped.all():
            counts[candidate_id] = count
        return counts

    async def counts_by_position(self) -> Dict[str, Dict[str, int]]:
        """Counts for every position; positions without candidates map to {}."""
        positions = await self.db.execute(select(Position.id))
        counts: Dict[str, Dict[str, int]] = {pid: {} for pid in positions.scalars().all()}

        candidates = await self.db.execute(select(Candidate.id, Candidate.position_id))
        for candidate_id, position_id in candidates.all():
            counts.setdefault(position_id, {})[candidate_id] = 0

        grouped = await self.db.execute(
            select(Vote.position_id, Vote.candidate_id, func.count(Vote.id))
            .group_by(Vote.position_id, Vote.candidate_id)
        )
        for position_id, candidate_id, count in grouped.all():
            counts.setdefault(position_id, {})[candidate_id] = count
        return counts
