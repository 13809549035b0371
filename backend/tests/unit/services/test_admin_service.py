"""
Unit Tests for AdminService
Tests for: positions, candidates, sessions, detailed results
"""
from datetime import datetime, timedelta, timezone
from typing import List
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    CandidateNotFoundError,
    ConflictError,
    InvalidFileTypeError,
    PositionNotFoundError,
    ValidationError,
)
from app.models.candidate import Candidate
from app.models.position import Position
from app.models.user import User
from app.models.vote import Vote
from app.schemas.admin import PositionCreate, VotingSessionCreate
from app.services.admin_service import AdminService, to_naive_utc


def make_service() -> AdminService:
    storage = MagicMock()
    storage.build_key.return_value = 'candidates/x.jpg'
    storage.upload_bytes = AsyncMock(return_value='http://storage.test/candidates/x.jpg')
    return AdminService(storage=storage)


async def add_vote(db: AsyncSession, user: User, candidate: Candidate) -> None:
    db.add(Vote(user_id=user.id, position_id=candidate.position_id, candidate_id=candidate.id,
                voted_at=datetime.utcnow()))
    await db.commit()


class TestPositions:

    @pytest.mark.asyncio
    async def test_create_and_list(self, db_session: AsyncSession):
        service = make_service()

        created = await service.create_position(db_session, PositionCreate(title='  Treasurer '))
        positions = await service.list_positions(db_session)

        assert created.title == 'Treasurer'
        assert created.max_votes == 1
        assert [p.id for p in positions] == [created.id]

    @pytest.mark.asyncio
    async def test_delete_removes_candidates(
        self, db_session: AsyncSession, position: Position, candidates: List[Candidate]
    ):
        await make_service().delete_position(db_session, position.id)

        remaining = await db_session.execute(select(Candidate.id))
        assert remaining.scalars().all() == []

    @pytest.mark.asyncio
    async def test_delete_with_votes_conflicts(
        self, db_session: AsyncSession, activated_user: User, position: Position, candidates: List[Candidate]
    ):
        await add_vote(db_session, activated_user, candidates[0])

        with pytest.raises(ConflictError):
            await make_service().delete_position(db_session, position.id)

    @pytest.mark.asyncio
    async def test_delete_missing(self, db_session: AsyncSession):
        with pytest.raises(PositionNotFoundError):
            await make_service().delete_position(db_session, '00000000-0000-0000-0000-000000000000')


class TestCandidates:

    @pytest.mark.asyncio
    async def test_create_with_image(self, db_session: AsyncSession, position: Position):
        service = make_service()

        candidate = await service.create_candidate(
            db_session, ' Chiamaka Eze ', position.id, matric_number='190591002',
            nickname='Chi', image=b'\x89PNG', image_content_type='image/png',
        )

        assert candidate.full_name == 'Chiamaka Eze'
        assert candidate.image_url == 'http://storage.test/candidates/x.jpg'
        assert candidate.is_active is True
        service.storage.upload_bytes.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_without_image(self, db_session: AsyncSession, position: Position):
        service = make_service()

        candidate = await service.create_candidate(db_session, 'Tunde Bakare', position.id)

        assert candidate.image_url is None
        assert candidate.matric_number is None
        service.storage.upload_bytes.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_matric(self, db_session: AsyncSession, position: Position, candidates: List[Candidate]):
        with pytest.raises(ConflictError):
            await make_service().create_candidate(
                db_session, 'Copy Cat', position.id, matric_number=candidates[0].matric_number
            )

    @pytest.mark.asyncio
    async def test_blank_name(self, db_session: AsyncSession, position: Position):
        with pytest.raises(ValidationError):
            await make_service().create_candidate(db_session, '  ', position.id)

    @pytest.mark.asyncio
    async def test_unknown_position(self, db_session: AsyncSession):
        with pytest.raises(PositionNotFoundError):
            await make_service().create_candidate(db_session, 'Ngozi Adeyemi', '00000000-0000-0000-0000-000000000000')

    @pytest.mark.asyncio
    async def test_bad_image_type(self, db_session: AsyncSession, position: Position):
        with pytest.raises(InvalidFileTypeError):
            await make_service().create_candidate(
                db_session, 'Ngozi Adeyemi', position.id, image=b'GIF89a', image_content_type='image/gif'
            )

    @pytest.mark.asyncio
    async def test_list_filtered_by_position(
        self, db_session: AsyncSession, position: Position, candidates: List[Candidate]
    ):
        other = Position(title='Treasurer')
        db_session.add(other)
        await db_session.commit()
        service = make_service()
        await service.create_candidate(db_session, 'Ibrahim Musa', other.id)

        assert len(await service.list_candidates(db_session, position.id)) == 2
        assert len(await service.list_candidates(db_session)) == 3

    @pytest.mark.asyncio
    async def test_delete_with_votes_conflicts(
        self, db_session: AsyncSession, activated_user: User, candidates: List[Candidate]
    ):
        await add_vote(db_session, activated_user, candidates[0])
        service = make_service()

        with pytest.raises(ConflictError):
            await service.delete_candidate(db_session, candidates[0].id)

        await service.delete_candidate(db_session, candidates[1].id)
        assert len(await service.list_candidates(db_session)) == 1

    @pytest.mark.asyncio
    async def test_delete_missing(self, db_session: AsyncSession):
        with pytest.raises(CandidateNotFoundError):
            await make_service().delete_candidate(db_session, '00000000-0000-0000-0000-000000000000')


class TestVotingSessions:

    def test_to_naive_utc(self):
        aware = datetime(2026, 3, 1, 9, 0, tzinfo=timezone(timedelta(hours=1)))
        assert to_naive_utc(aware) == datetime(2026, 3, 1, 8, 0)
        assert to_naive_utc(datetime(2026, 3, 1, 8, 0)) == datetime(2026, 3, 1, 8, 0)

    @pytest.mark.asyncio
    async def test_created_inactive(self, db_session: AsyncSession, admin_user: User):
        data = VotingSessionCreate(
            title='SUG Election',
            start_time=datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc),
            end_time=datetime(2026, 3, 1, 18, 0, tzinfo=timezone.utc),
        )

        session = await make_service().create_voting_session(db_session, data, created_by_id=admin_user.id)

        assert session.is_active is False
        assert session.start_time == datetime(2026, 3, 1, 8, 0)
        assert session.created_by_id == admin_user.id

    @pytest.mark.asyncio
    async def test_end_before_start(self, db_session: AsyncSession):
        data = VotingSessionCreate(
            title='Backwards',
            start_time=datetime(2026, 3, 1, 18, 0),
            end_time=datetime(2026, 3, 1, 8, 0),
        )

        with pytest.raises(ValidationError) as exc_info:
            await make_service().create_voting_session(db_session, data)

        assert exc_info.value.details == {'field': 'end_time'}


class TestDetailedResults:

    @pytest.mark.asyncio
    async def test_sorted_breakdown(
        self, db_session: AsyncSession, activated_user: User, position: Position, candidates: List[Candidate]
    ):
        await add_vote(db_session, activated_user, candidates[1])

        results = await make_service().get_detailed_results(db_session)

        assert results['counts'][position.id] == {candidates[0].id: 0, candidates[1].id: 1}
        breakdown = results['positions'][0]
        assert breakdown['title'] == 'President'
        assert breakdown['total_votes'] == 1
        assert breakdown['candidates'][0]['candidate_id'] == candidates[1].id
        assert breakdown['candidates'][0]['full_name'] == candidates[1].full_name


class TestLogging:

    def test_uses_shared_service_logger(self):
        from app.core import logging_config
        import importlib
        admin_service = importlib.import_module('app.services.admin_service')

        assert admin_service.logger is logging_config.logger
        assert admin_service.logger.name == 'evoting'
