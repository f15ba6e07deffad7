# quizform/database.py
import os

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

# Load the .env from the project root so this also works when database.py
# is imported indirectly (alembic, tests).
dotenv_path = os.path.join(os.path.dirname(__file__), "..", ".env")
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)
else:
    load_dotenv()


DATABASE_URL = os.getenv("DATABASE_URL")

if DATABASE_URL is None:
    print(
        "WARNING: DATABASE_URL not found in environment! Falling back to a local SQLite database."
    )
    sqlite_db_path = os.path.join(os.path.dirname(__file__), "quizform_fallback.db")
    DATABASE_URL = f"sqlite+aiosqlite:///{sqlite_db_path}"

IS_SQLITE = DATABASE_URL.startswith("sqlite")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
AUTO_CREATE_TABLES = (
    os.getenv("AUTO_CREATE_TABLES", "true" if IS_SQLITE else "false").lower() == "true"
)

print(f"DEBUG [database.py]: Using DATABASE_URL: {DATABASE_URL.split('@')[-1]}")

# SQLite connections are not shared between event loops (TestClient, alembic,
# scripts), so the pool is disabled for it.
engine_kwargs = {"echo": SQL_ECHO}
if IS_SQLITE:
    engine_kwargs["poolclass"] = NullPool

engine = create_async_engine(DATABASE_URL, **engine_kwargs)

AsyncSessionFactory = async_sessionmaker(
    bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False
)

Base = declarative_base()


async def get_db_session() -> AsyncSession:
    async with AsyncSessionFactory() as session:
        try:
            yield session
            await session.commit()  # commit at the end if everything went well
        except Exception:
            await session.rollback()
            raise


async def create_db_and_tables():
    """
    Creates the schema directly for local SQLite setups. Against Postgres the
    schema is managed by Alembic and this is a no-op unless AUTO_CREATE_TABLES
    is set.
    """
    if not AUTO_CREATE_TABLES:
        print("Database tables are managed by Alembic.")
        return

    from . import models  # noqa: F401  registers the tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("Database tables created (AUTO_CREATE_TABLES).")


async def drop_db_and_tables():
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
