"""
FastAPI Main Application
Daily financial decision service
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import AsyncGenerator
import logging

from app.config import settings
from app.core.logging import setup_logging
from app.infrastructure.db.database import (
    close_db,
    create_engine_from_url,
    create_session_factory,
    init_db,
)
from app.domain.services.decision_engine import DecisionEngine
from app.services.decision_service import DecisionCacheManager
from app.api.routes import decision, health

setup_logging(
    level=settings.LOG_LEVEL,
    log_file=settings.LOG_FILE,
    max_bytes=settings.LOG_MAX_BYTES,
    backup_count=settings.LOG_BACKUP_COUNT,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Builds the store handles and the decision manager, disposes them on exit
    """
    logger.info("="*60)
    logger.info("🚀 Starting Decision Engine (%s)", settings.APP_ENV)
    logger.info("="*60)

    engine = create_engine_from_url(settings.DATABASE_URL, echo=settings.DEBUG)
    if settings.AUTO_CREATE_TABLES:
        await init_db(engine)
        logger.info("✅ Database tables ensured")

    session_factory = create_session_factory(engine)
    app.state.session_factory = session_factory
    app.state.decision_manager = DecisionCacheManager(
        session_factory=session_factory,
        decision_engine=DecisionEngine(),
        decision_version=settings.DECISION_VERSION,
        default_timezone=settings.DEFAULT_TIMEZONE,
    )
    logger.info("✅ Decision engine %s ready", settings.DECISION_VERSION)
    logger.info("   ✅ API Server: http://%s:%s%s", settings.API_HOST, settings.API_PORT, settings.API_PREFIX)

    yield

    logger.info("🛑 Shutting down Decision Engine")
    await close_db(engine)
    logger.info("✅ Database connections closed")


def create_app() -> FastAPI:
    """Build the application (routes, middleware, lifespan)"""
    application = FastAPI(
        title="Budget Copilot - Decision Engine",
        description="One financial decision per user per day",
        version="1.0.0",
        lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health.router, tags=["Health"])
    application.include_router(decision.router, prefix=settings.API_PREFIX, tags=["Decision"])

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
