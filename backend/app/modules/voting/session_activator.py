"""Start and end voting sessions, keeping at most one active."""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import logger
from app.models.voting_session import VotingSession


@dataclass
class SessionChange:
    ok: bool
    reason: Optional[str] = None
    session: Optional[VotingSession] = None


async def start_session(db: AsyncSession, session_id: str) -> SessionChange:
    """
    Make session_id the only active session.

    Deactivates every other session and activates the target in a single
    commit. A missing target modifies nothing.
    """
    target = await db.get(VotingSession, session_id)
    if target is None:
        return SessionChange(ok=False, reason="NOT_FOUND")

    try:
        await db.execute(
            update(VotingSession)
            .where(VotingSession.id != session_id)
            .values(is_active=False)
        )
        target.is_active = True
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise

    logger.info(f"Voting session started: {target.title} ({target.id})")
    return SessionChange(ok=True, session=target)


async def end_session(db: AsyncSession, session_id: str) -> SessionChange:
    """Deactivate session_id only."""
    target = await db.get(VotingSession, session_id)
    if target is None:
        return SessionChange(ok=False, reason="NOT_FOUND")

    target.is_active = False
    await db.commit()

    logger.info(f"Voting session ended: {target.title} ({target.id})")
    return SessionChange(ok=True, session=target)
