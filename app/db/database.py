import uuid
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from app.core.config import DatabaseSettings
from app.utils.dates import utcnow

Base = declarative_base()

class BaseModel(Base):
    __abstract__ = True

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

def get_engine(db_settings: DatabaseSettings) -> AsyncEngine:
    return create_async_engine(
        db_settings.database_url,
        future=True,
        echo=db_settings.debug_sql,
        poolclass=NullPool,
    )

def get_async_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

async def create_tables(engine: AsyncEngine) -> None:
    import app.models  # noqa: F401  registers every table on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.sessionmaker() as session:
        yield session
