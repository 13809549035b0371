"""Session clock: decides whether voting is open at a given instant."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.voting_session import VotingSession


def utcnow() -> datetime:
    return datetime.utcnow()


def is_session_open(session: VotingSession, now: datetime) -> bool:
    """A session is open when it is active and now lies in [start_time, end_time]."""
    return bool(session.is_active) and session.start_time <= now <= session.end_time


async def get_open_session(db: AsyncSession, now: Optional[datetime] = None) -> Optional[VotingSession]:
    """Return the session currently accepting ballots, if any."""
    now = now or utcnow()
    result = await db.execute(
        select(VotingSession)
        .where(
            VotingSession.is_active == True,  # noqa: E712
            VotingSession.start_time <= now,
            VotingSession.end_time >= now,
        )
        .order_by(VotingSession.start_time.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def is_voting_open(db: AsyncSession, now: Optional[datetime] = None) -> bool:
    """
    True iff some active session's window contains now.

    An active flag left on past the window does not count as open.
    """
    return await get_open_session(db, now) is not None


async def get_active_session(db: AsyncSession) -> Optional[VotingSession]:
    """The flagged session, regardless of its window."""
    result = await db.execute(
        select(VotingSession).where(VotingSession.is_active == True).limit(1)  # noqa: E712
    )
    return result.scalar_one_or_none()
