from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.platform.config import settings


def build_engine(database_url: str = None):
    database_url = database_url or settings.DATABASE_URL
    if database_url.startswith("sqlite"):
        # SQLite has no connection pool sizing
        return create_async_engine(database_url, echo=False, future=True)
    return create_async_engine(
        database_url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        pool_recycle=1800,
        pool_size=20,
        max_overflow=30,  # (burst capacity)
        pool_timeout=30,
    )


engine = build_engine()
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False, autocommit=False)
