"""
Database Seed Data Module

Bootstrap administrator plus a demo election for local development.
Run with: python -m app.db.seed_data [clear]
"""
import asyncio
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import AsyncSessionLocal, init_db
from app.core.logging_config import logger
from app.models.candidate import Candidate
from app.models.position import Position
from app.models.user import User
from app.models.voting_session import VotingSession


# ==================== Sample Data Constants ====================

SAMPLE_POSITIONS = [
    {
        "title": "President",
        "description": "Leads the association and chairs the executive council",
        "candidates": [
            {"full_name": "Adebayo Okafor", "nickname": "Bayo", "matric_number": "190591001"},
            {"full_name": "Chiamaka Eze", "nickname": "Chi", "matric_number": "190591002"},
        ],
    },
    {
        "title": "General Secretary",
        "description": "Keeps records and handles official correspondence",
        "candidates": [
            {"full_name": "Tunde Bakare", "nickname": None, "matric_number": "200591003"},
            {"full_name": "Ngozi Adeyemi", "nickname": "Ngo", "matric_number": "200591004"},
        ],
    },
    {
        "title": "Financial Secretary",
        "description": "Manages dues and the association's accounts",
        "candidates": [
            {"full_name": "Ibrahim Musa", "nickname": None, "matric_number": "210591005"},
        ],
    },
]


async def seed_admin(db: Optional[AsyncSession] = None) -> User:
    """Create the bootstrap administrator if missing. Idempotent."""
    if db is None:
        async with AsyncSessionLocal() as session:
            return await seed_admin(session)

    email = settings.ADMIN_EMAIL.lower()
    result = await db.execute(select(User).where(User.email == email))
    admin = result.scalar_one_or_none()

    if admin is None:
        admin = User(
            email=email,
            full_name=settings.ADMIN_FULL_NAME,
            is_admin=True,
        )
        db.add(admin)
        await db.commit()
        await db.refresh(admin)
        logger.info(f"[Seed] Created administrator {email}")
    elif not admin.is_admin:
        admin.is_admin = True
        await db.commit()
        logger.info(f"[Seed] Promoted {email} to administrator")

    return admin


async def seed_positions(db: AsyncSession) -> List[Position]:
    """Create sample positions with their candidates"""
    positions = []

    for position_data in SAMPLE_POSITIONS:
        existing = await db.execute(select(Position).where(Position.title == position_data["title"]))
        if existing.scalar_one_or_none() is not None:
            continue

        position = Position(title=position_data["title"], description=position_data["description"])
        db.add(position)
        await db.flush()

        for candidate_data in position_data["candidates"]:
            db.add(Candidate(position_id=position.id, **candidate_data))
        positions.append(position)

    await db.flush()
    print(f"Created {len(positions)} positions")
    return positions


async def seed_voting_session(db: AsyncSession, admin: User) -> Optional[VotingSession]:
    """Create an inactive demo session covering the next week"""
    existing = await db.execute(select(VotingSession).limit(1))
    if existing.scalar_one_or_none() is not None:
        return None

    now = datetime.utcnow()
    session = VotingSession(
        title="Demo Election",
        description="Start it from the admin dashboard to open voting",
        start_time=now,
        end_time=now + timedelta(days=7),
        is_active=False,
        created_by_id=admin.id,
    )
    db.add(session)
    await db.flush()
    print("Created demo voting session")
    return session


async def seed_all():
    """Seed all sample data"""
    print("=" * 50)
    print("Starting database seeding...")
    print("=" * 50)

    await init_db()

    async with AsyncSessionLocal() as db:
        try:
            admin = await seed_admin(db)
            await seed_positions(db)
            await seed_voting_session(db, admin)

            await db.commit()
            print("=" * 50)
            print("Database seeding completed successfully!")
            print("=" * 50)

        except Exception as e:
            await db.rollback()
            print(f"Error seeding database: {e}")
            raise


async def clear_all():
    """Clear all data from database"""
    print("Clearing all data...")
    async with AsyncSessionLocal() as db:
        # Delete in reverse order of dependencies
        await db.execute(text("DELETE FROM votes"))
        await db.execute(text("DELETE FROM candidates"))
        await db.execute(text("DELETE FROM positions"))
        await db.execute(text("DELETE FROM voting_sessions"))
        await db.execute(text("DELETE FROM users"))
        await db.commit()
        print("All data cleared!")


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "clear":
        asyncio.run(clear_all())
    else:
        asyncio.run(seed_all())
