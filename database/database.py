# Academia - async database setup
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from access.errors import Conflict, ValidationFailed
from .models import Base

logger = logging.getLogger(__name__)

# Default for dev; override via config
DATABASE_URL = "sqlite+aiosqlite:///./academia.db"

engine = create_async_engine(
    DATABASE_URL,
    echo=False,
)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """One session and one transaction per request; any exception rolls it back."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def commit_or_conflict(session: AsyncSession, detail: str) -> None:
    """Commit, turning a storage uniqueness violation into a Conflict.

    The invariant guards read before they write, so two concurrent requests can
    both pass them; the unique constraints reject the second writer here.
    A NOT NULL violation is reported as a bad request instead.
    """
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.info("Integrity violation rejected: %s", e.orig)
        if "NOT NULL" in str(e.orig):
            raise ValidationFailed("A required field is missing")
        raise Conflict(detail)


async def init_db(database_url: str | None = None):
    global engine, async_session
    if database_url:
        engine = create_async_engine(database_url, echo=False)
        async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_db():
    await engine.dispose()
