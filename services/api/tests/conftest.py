"""Shared fixtures: a throwaway SQLite database per test."""

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from app.main import app
from app.models import Member
from app.services.members import MemberStore
from app.stores.postgres import build_engine, build_session_factory, create_tables

FEB_2024 = datetime(2024, 2, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
async def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite file with the schema created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'stats.db'}")
    await create_tables(engine)
    try:
        yield build_session_factory(engine)
    finally:
        await engine.dispose()


@pytest.fixture
def store(session_factory) -> MemberStore:
    return MemberStore(session_factory)


async def count_members(session_factory, slack_uid: str | None = None) -> int:
    query = select(func.count(Member.id))
    if slack_uid is not None:
        query = query.where(Member.slack_uid == slack_uid)
    async with session_factory() as session:
        return (await session.execute(query)).scalar() or 0


@pytest.fixture
async def client():
    """HTTP client bound to the app without running its lifespan."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
