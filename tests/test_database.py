import asyncio

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from access import Conflict, ValidationFailed
from database import database
from database.database import commit_or_conflict
from database.models import Base, Course, User
from database.seed import seed


async def _commit_courses(db_path, *courses):
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        sessions = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        for course in courses:
            async with sessions() as session:
                session.add(course)
                await commit_or_conflict(session, "Course code already exists")
    finally:
        await engine.dispose()


def test_unique_violation_is_a_conflict(tmp_path):
    with pytest.raises(Conflict) as exc:
        asyncio.run(
            _commit_courses(
                tmp_path / "db.sqlite",
                Course(course_code="CS1", course_name="One"),
                Course(course_code="CS1", course_name="Again"),
            )
        )
    assert exc.value.detail == "Course code already exists"


def test_missing_required_column_is_a_validation_error(tmp_path):
    with pytest.raises(ValidationFailed) as exc:
        asyncio.run(_commit_courses(tmp_path / "db.sqlite", Course(course_code="CS2", course_name=None)))
    assert exc.value.status_code == 400


def test_seed_runs_once_and_skips_afterwards(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
    asyncio.run(seed())
    asyncio.run(seed())

    async def _count_users():
        await database.init_db(f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
        try:
            async with database.async_session() as session:
                return (await session.execute(select(func.count(User.id)))).scalar_one()
        finally:
            await database.dispose_db()

    # admin, teacher1, student1
    assert asyncio.run(_count_users()) == 3
