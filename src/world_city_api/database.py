import os
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm import declarative_base
from dotenv import load_dotenv

load_dotenv()


def get_database_url():
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    # Fallback: compose from the individual connection settings
    db_host = os.getenv("DB_HOST", "localhost")
    db_port = os.getenv("DB_PORT", "5432")
    db_user = os.getenv("DB_USER", "root")
    db_pass = os.getenv("DB_PASS", "root")
    db_name = os.getenv("DB_NAME", "db")

    return f"postgresql+asyncpg://{db_user}:{db_pass}@{db_host}:{db_port}/{db_name}"


engine: AsyncEngine | None = None
AsyncSessionLocal: sessionmaker | None = None

Base = declarative_base()


def init_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Creates the process-wide engine and session factory.
    Called once on application startup; calling it again is a no-op.
    """
    global engine, AsyncSessionLocal
    if engine is not None:
        return engine

    url = database_url or get_database_url()
    if not url:
        raise ValueError("Database configuration missing")

    echo = os.getenv("DB_ECHO", "false").lower() in ("1", "true", "yes")
    engine = create_async_engine(url, echo=echo)
    AsyncSessionLocal = sessionmaker(
        autoflush=False,
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return engine


async def dispose_engine() -> None:
    global engine, AsyncSessionLocal
    if engine is None:
        return
    await engine.dispose()
    engine = None
    AsyncSessionLocal = None


async def get_db():
    if AsyncSessionLocal is None:
        raise RuntimeError("Database engine is not initialized. Call init_engine() on startup.")
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
