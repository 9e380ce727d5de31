from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.infrastructure.db.database import Base, create_session_factory
from app.infrastructure.db import models  # noqa: F401
from app.api.routes import decision, health
from app.domain.services.decision_engine import DecisionEngine
from app.services.decision_service import DecisionCacheManager


class FixedClock:
    """Settable "now" for the cache manager"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture()
def clock() -> FixedClock:
    # Saturday 2026-10-17, 10:00 UTC
    return FixedClock(datetime(2026, 10, 17, 10, 0, tzinfo=timezone.utc))


@pytest.fixture()
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    db_path = tmp_path / "test.db"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def manager(session_factory, clock) -> DecisionCacheManager:
    return DecisionCacheManager(
        session_factory=session_factory,
        decision_engine=DecisionEngine(),
        decision_version="test",
        default_timezone="UTC",
        clock=clock,
    )


@pytest.fixture()
async def app(session_factory, manager) -> FastAPI:
    app = FastAPI()
    app.include_router(health.router, tags=["Health"])
    app.include_router(decision.router, prefix="/api/v1", tags=["Decision"])

    app.state.session_factory = session_factory
    app.state.decision_manager = manager

    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
