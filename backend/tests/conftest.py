"""
e-Voting API - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timedelta
from typing import AsyncGenerator, List

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_evoting.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['GOOGLE_CLIENT_ID'] = 'test-google-client-id'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['MATRIC_LEGACY_ALLOWLIST'] = 'LEG/2015/001'
os.environ['LOG_FILE'] = ''

from app.main import app
from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.models import Candidate, Position, User, VotingSession

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_evoting.db'
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
    connect_args={'timeout': 30},
)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


def make_matric_number() -> str:
    return fake.unique.numerify('#########')


def make_auth_headers(user: User) -> dict:
    token = create_access_token({'sub': str(user.id), 'email': user.email})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """A freshly signed-in student with no verification yet"""
    user = User(
        email=fake.unique.email(),
        full_name=fake.name(),
        google_id=fake.uuid4(),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def activated_user(db_session: AsyncSession) -> User:
    """A student who has passed every verification step"""
    user = User(
        email=fake.unique.email(),
        full_name=fake.name(),
        google_id=fake.uuid4(),
        matric_number=make_matric_number(),
        document_url='http://storage.test/course-forms/form.pdf',
        document_verified=True,
        face_verified=True,
        is_activated=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an admin test user"""
    user = User(
        email=fake.unique.email(),
        full_name=fake.name(),
        is_admin=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Generate authentication headers for test user"""
    return make_auth_headers(test_user)


@pytest.fixture
def activated_auth_headers(activated_user: User) -> dict:
    return make_auth_headers(activated_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    """Generate authentication headers for admin user"""
    return make_auth_headers(admin_user)


@pytest.fixture
async def position(db_session: AsyncSession) -> Position:
    position = Position(title='President', description='Head of the association')
    db_session.add(position)
    await db_session.commit()
    await db_session.refresh(position)
    return position


@pytest.fixture
async def candidates(db_session: AsyncSession, position: Position) -> List[Candidate]:
    """Two active candidates for the position fixture"""
    rows = [
        Candidate(full_name=fake.name(), position_id=position.id, matric_number=make_matric_number()),
        Candidate(full_name=fake.name(), position_id=position.id, matric_number=make_matric_number()),
    ]
    db_session.add_all(rows)
    await db_session.commit()
    for row in rows:
        await db_session.refresh(row)
    return rows


@pytest.fixture
async def open_session(db_session: AsyncSession) -> VotingSession:
    """An active session whose window contains now"""
    now = datetime.utcnow()
    session = VotingSession(
        title='General Election',
        start_time=now - timedelta(hours=1),
        end_time=now + timedelta(hours=1),
        is_active=True,
    )
    db_session.add(session)
    await db_session.commit()
    await db_session.refresh(session)
    return session


@pytest.fixture
def session_factory() -> async_sessionmaker:
    """Factory for extra sessions, one per simulated request"""
    return TestSessionLocal
