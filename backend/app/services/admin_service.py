"""
Admin Service - Business logic for election administration

Handles:
- Position and candidate management (deletion guarded by existing votes)
- Voting session creation
- Detailed results and user listing
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    CandidateNotFoundError,
    ConflictError,
    PositionNotFoundError,
    ValidationError,
)
from app.core.logging_config import logger
from app.models.candidate import Candidate
from app.models.position import Position
from app.models.user import User
from app.models.vote import Vote
from app.models.voting_session import VotingSession
from app.modules.voting.ledger import VoteLedger
from app.schemas.admin import PositionCreate, VotingSessionCreate
from app.services.document_service import validate_upload
from app.services.storage_service import StorageService, storage_service

ALLOWED_CANDIDATE_IMAGE_TYPES = ["image/jpeg", "image/png"]
CANDIDATE_IMAGE_FOLDER = "candidates"
MAX_CANDIDATE_IMAGE_SIZE = 5 * 1024 * 1024


def to_naive_utc(value: datetime) -> datetime:
    """Sessions are stored as naive UTC"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class AdminService:
    """Service for managing positions, candidates and voting sessions"""

    def __init__(self, storage: Optional[StorageService] = None):
        self.storage = storage or storage_service

    # ==================== POSITIONS ====================

    async def create_position(self, db: AsyncSession, data: PositionCreate) -> Position:
        position = Position(
            title=data.title.strip(),
            description=data.description,
            max_votes=data.max_votes,
        )
        db.add(position)
        await db.commit()
        await db.refresh(position)
        logger.info(f"Position created: {position.title} ({position.id})")
        return position

    async def list_positions(self, db: AsyncSession) -> List[Position]:
        result = await db.execute(select(Position).order_by(Position.created_at))
        return list(result.scalars().all())

    async def delete_position(self, db: AsyncSession, position_id: str) -> None:
        """Delete a position and its candidates. Refused while votes reference it."""
        position = await db.get(Position, position_id)
        if position is None:
            raise PositionNotFoundError(position_id)

        if await self._vote_count(db, Vote.position_id == position_id):
            raise ConflictError(
                "Cannot delete a position that has votes",
                details={"position_id": position_id},
            )

        await db.execute(delete(Candidate).where(Candidate.position_id == position_id))
        await db.execute(delete(Position).where(Position.id == position_id))
        await db.commit()
        logger.info(f"Position deleted: {position_id}")

    # ==================== CANDIDATES ====================

    async def create_candidate(
        self,
        db: AsyncSession,
        full_name: str,
        position_id: str,
        matric_number: Optional[str] = None,
        nickname: Optional[str] = None,
        image: Optional[bytes] = None,
        image_content_type: Optional[str] = None,
    ) -> Candidate:
        full_name = (full_name or "").strip()
        if not full_name:
            raise ValidationError("Candidate name is required", field="full_name")

        position = await db.get(Position, position_id)
        if position is None:
            raise PositionNotFoundError(position_id)

        matric_number = (matric_number or "").strip().upper() or None
        if matric_number:
            existing = await db.execute(
                select(Candidate.id).where(Candidate.matric_number == matric_number)
            )
            if existing.scalar_one_or_none() is not None:
                raise ConflictError(
                    f"A candidate with matric number '{matric_number}' already exists",
                    details={"matric_number": matric_number},
                )

        image_url = None
        if image:
            validate_upload(image, image_content_type, ALLOWED_CANDIDATE_IMAGE_TYPES, MAX_CANDIDATE_IMAGE_SIZE)
            key = self.storage.build_key(CANDIDATE_IMAGE_FOLDER, image_content_type)
            image_url = await self.storage.upload_bytes(image, key, image_content_type)

        candidate = Candidate(
            full_name=full_name,
            matric_number=matric_number,
            nickname=(nickname or "").strip() or None,
            image_url=image_url,
            position_id=position_id,
        )
        db.add(candidate)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(
                f"A candidate with matric number '{matric_number}' already exists",
                details={"matric_number": matric_number},
            )
        await db.refresh(candidate)
        logger.info(f"Candidate created: {candidate.full_name} for position {position_id}")
        return candidate

    async def list_candidates(self, db: AsyncSession, position_id: Optional[str] = None) -> List[Candidate]:
        query = select(Candidate).order_by(Candidate.created_at)
        if position_id:
            query = query.where(Candidate.position_id == position_id)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def delete_candidate(self, db: AsyncSession, candidate_id: str) -> None:
        candidate = await db.get(Candidate, candidate_id)
        if candidate is None:
            raise CandidateNotFoundError(candidate_id)

        if await self._vote_count(db, Vote.candidate_id == candidate_id):
            raise ConflictError(
                "Cannot delete a candidate that has votes",
                details={"candidate_id": candidate_id},
            )

        await db.execute(delete(Candidate).where(Candidate.id == candidate_id))
        await db.commit()
        logger.info(f"Candidate deleted: {candidate_id}")

    # ==================== VOTING SESSIONS ====================

    async def create_voting_session(
        self,
        db: AsyncSession,
        data: VotingSessionCreate,
        created_by_id: Optional[str] = None,
    ) -> VotingSession:
        """Create an inactive session; starting it is the session activator's job."""
        start_time = to_naive_utc(data.start_time)
        end_time = to_naive_utc(data.end_time)
        if end_time <= start_time:
            raise ValidationError("end_time must be after start_time", field="end_time")

        session = VotingSession(
            title=data.title.strip(),
            description=data.description,
            start_time=start_time,
            end_time=end_time,
            is_active=False,
            created_by_id=created_by_id,
        )
        db.add(session)
        await db.commit()
        await db.refresh(session)
        logger.info(f"Voting session created: {session.title} ({session.id})")
        return session

    async def list_voting_sessions(self, db: AsyncSession) -> List[VotingSession]:
        result = await db.execute(select(VotingSession).order_by(VotingSession.start_time.desc()))
        return list(result.scalars().all())

    # ==================== RESULTS ====================

    async def get_detailed_results(self, db: AsyncSession) -> Dict[str, Any]:
        """Counts map plus titled, sorted per-position breakdown"""
        counts = await VoteLedger(db).counts_by_position()

        positions = {p.id: p for p in await self.list_positions(db)}
        candidates = {c.id: c for c in await self.list_candidates(db)}

        breakdown = []
        for position_id, tally in counts.items():
            position = positions.get(position_id)
            rows = [
                {
                    "candidate_id": candidate_id,
                    "full_name": candidates[candidate_id].full_name if candidate_id in candidates else "",
                    "votes": votes,
                }
                for candidate_id, votes in tally.items()
            ]
            rows.sort(key=lambda row: row["votes"], reverse=True)
            breakdown.append({
                "position_id": position_id,
                "title": position.title if position else "",
                "total_votes": sum(tally.values()),
                "candidates": rows,
            })

        return {"counts": counts, "positions": breakdown}

    # ==================== USERS ====================

    async def list_users(self, db: AsyncSession) -> List[User]:
        result = await db.execute(select(User).order_by(User.created_at))
        return list(result.scalars().all())

    @staticmethod
    async def _vote_count(db: AsyncSession, condition) -> int:
        result = await db.execute(select(func.count(Vote.id)).where(condition))
        return result.scalar() or 0


admin_service = AdminService()
