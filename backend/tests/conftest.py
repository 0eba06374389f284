"""
Test configuration and fixtures for ClubDesk backend tests.
"""
import os
import pytest
import pytest_asyncio
from datetime import date, datetime, timezone
from typing import AsyncGenerator, Optional
from zoneinfo import ZoneInfo
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import NullPool

from clubdesk.main import app
from clubdesk.db.base import Base, build_engine, get_db, session_factory
from clubdesk.core.clock import FixedClock, get_clock
from clubdesk.core.security import hash_password, issue_member_token
from clubdesk.models.location import Location
from clubdesk.models.member import Member, MemberRole, MemberStatus, MembershipLevel
from clubdesk.models.room_assignment import RoomAssignment


# A file, not :memory:, so every pooled connection sees the same schema.
TEST_DB_FILE = "./clubdesk_test.db"
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{TEST_DB_FILE}"

# Sunday 15 March 2026; Seoul is UTC+9 all year.
MEETING_DATE = date(2026, 3, 15)


def seoul(year, month, day, hour=0, minute=0, second=0) -> datetime:
    """A Seoul wall-clock time as an aware UTC datetime."""
    local = datetime(year, month, day, hour, minute, second, tzinfo=ZoneInfo("Asia/Seoul"))
    return local.astimezone(timezone.utc)


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Fresh schema in a throwaway SQLite file for every test."""
    engine = build_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Session shared by the test body and the API client; rolled back afterwards."""
    async with session_factory(db_engine)() as session:
        yield session
        await session.rollback()


@pytest.fixture
def clock() -> FixedClock:
    """Wednesday before the test meeting, noon in Seoul."""
    return FixedClock(seoul(2026, 3, 11, 12, 0))


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, clock: FixedClock) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session and clock overrides."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_member(db_session: AsyncSession):
    """Factory for members with sensible defaults."""
    counter = {"n": 0}

    async def _make(
        username: Optional[str] = None,
        role: MemberRole = MemberRole.MEMBER,
        membership_level: MembershipLevel = MembershipLevel.HONOR_I,
        is_lead: bool = False,
        is_sub_lead: bool = False,
        status: MemberStatus = MemberStatus.ACTIVE,
    ) -> Member:
        counter["n"] += 1
        member = Member(
            username=username or f"member{counter['n']}",
            password_hash=hash_password("TestPass123"),
            english_name=f"Member {counter['n']}",
            role=role,
            membership_level=membership_level,
            is_lead=is_lead,
            is_sub_lead=is_sub_lead,
            status=status,
        )
        db_session.add(member)
        await db_session.flush()
        return member

    return _make


@pytest_asyncio.fixture
async def test_admin(make_member) -> Member:
    return await make_member(username="admin", role=MemberRole.ADMIN)


@pytest_asyncio.fixture
async def test_member(make_member) -> Member:
    return await make_member(username="alice")


@pytest.fixture
def headers_for():
    """Authorization headers for a member."""
    def _headers(member: Member) -> dict:
        return {"Authorization": f"Bearer {issue_member_token(member.id)}"}
    return _headers


@pytest.fixture
def admin_headers(test_admin: Member, headers_for) -> dict:
    return headers_for(test_admin)


@pytest.fixture
def auth_headers(test_member: Member, headers_for) -> dict:
    return headers_for(test_member)


@pytest_asyncio.fixture
async def test_location(db_session: AsyncSession) -> Location:
    """Gangnam venue, Sunday 10:00 meetings."""
    location = Location(
        name="Gangnam",
        address="Seoul, Gangnam-gu",
        timezone="Asia/Seoul",
        default_meeting_day=0,
        default_meeting_time="10:00",
        is_active=True,
    )
    db_session.add(location)
    await db_session.flush()
    return location


@pytest.fixture
def make_room(db_session: AsyncSession):
    """Factory for a room assignment on the test meeting date."""
    async def _make(
        leader: Member,
        members: list[Member],
        location: Optional[Location] = None,
        meeting_date: date = MEETING_DATE,
        room_number: int = 1,
    ) -> RoomAssignment:
        room = RoomAssignment(
            meeting_date=meeting_date,
            location_id=location.id if location else None,
            room_number=room_number,
            room_name=f"Room {room_number}",
            leader_id=leader.id,
            member_ids=[m.id for m in members],
        )
        db_session.add(room)
        await db_session.flush()
        return room

    return _make
