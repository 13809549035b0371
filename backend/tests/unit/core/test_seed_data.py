"""
Unit Tests for the bootstrap administrator seed
"""
from typing import List

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.seed_data import seed_admin
from app.models.candidate import Candidate
from app.models.user import User
from app.models.vote import Vote
from app.modules.voting.eligibility import BallotRejection
from app.modules.voting.ledger import VoteLedger


class TestSeedAdmin:

    @pytest.mark.asyncio
    async def test_creates_admin_once(self, db_session: AsyncSession):
        first = await seed_admin(db_session)
        second = await seed_admin(db_session)

        count = await db_session.scalar(
            select(func.count()).select_from(User).where(User.email == settings.ADMIN_EMAIL.lower())
        )
        assert first.id == second.id
        assert first.is_admin is True
        assert count == 1

    @pytest.mark.asyncio
    async def test_admin_starts_unverified(self, db_session: AsyncSession):
        admin = await seed_admin(db_session)

        assert admin.document_verified is False
        assert admin.face_verified is False
        assert admin.is_activated is False

    @pytest.mark.asyncio
    async def test_seeded_admin_cannot_vote_without_verification(
        self, db_session: AsyncSession, candidates: List[Candidate], open_session
    ):
        admin = await seed_admin(db_session)

        check = await VoteLedger(db_session).cast_vote(admin.id, candidates[0].position_id, candidates[0].id)

        assert check.accepted is False
        assert check.rejection == BallotRejection.NOT_ACTIVATED
        assert await db_session.scalar(select(func.count(Vote.id))) == 0

    @pytest.mark.asyncio
    async def test_promotes_existing_account(self, db_session: AsyncSession):
        user = User(email=settings.ADMIN_EMAIL.lower(), full_name='Existing Student')
        db_session.add(user)
        await db_session.commit()

        admin = await seed_admin(db_session)

        assert admin.id == user.id
        assert admin.is_admin is True
