# 📄 File: patient_api/shared/infrastructure/database/connection.py
#
# 🧭 Purpose (Layman Explanation):
# Keeps one shared line open to the database that stores questionnaire answers and
# subscriptions, and can tell the health page whether that line still works.
#
# 🧪 Purpose (Technical Summary):
# Owns the process-wide AsyncEngine. Pool and asyncpg options only apply to the Postgres
# backend (Supabase, through pgbouncer); SQLite via aiosqlite runs with defaults for tests.
# Also holds the declarative Base every module's ORM models register on.
#
# 🔗 Dependencies:
# - sqlalchemy (async engine, declarative base), asyncpg
# - patient_api/shared/config/settings.py (DATABASE_URL, DB_* pool settings)
#
# 🔄 Connected Modules / Calls From:
# - patient_api/shared/infrastructure/database/session.py
# - Module ORM models (Base), migrations/env.py
# - patient_api/main.py (lifespan), patient_api/api/v1/health.py

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import declarative_base

from patient_api.shared.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

HEALTH_CHECK_ATTEMPTS = 3
HEALTH_CHECK_BACKOFF_SECONDS = 0.5

_engine: Optional[AsyncEngine] = None


def _checked_at() -> str:
    return datetime.now(timezone.utc).isoformat()


def _engine_options(settings: Settings) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.DEBUG, "pool_pre_ping": True}
    if make_url(settings.database_url).get_backend_name() != "postgresql":
        return options

    options.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        connect_args={
            "server_settings": {"application_name": settings.SERVICE_NAME},
            "command_timeout": 60,
            # pgbouncer in transaction mode rejects cached prepared statements
            "statement_cache_size": 0,
        },
    )
    return options


async def create_tables(engine: AsyncEngine) -> None:
    """Create missing consultation and payments tables (tests, local development)."""
    from patient_api.modules.consultation.infrastructure.database import models as consultation_models  # noqa: F401
    from patient_api.modules.payments.infrastructure.database import models as payment_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Ensured tables: {', '.join(sorted(Base.metadata.tables))}")


async def initialize_database() -> None:
    """
    Create the shared engine and, when DB_AUTO_CREATE_TABLES is set, the tables.

    Raises:
        SQLAlchemyError: If the engine cannot be created or the tables cannot be built
    """
    global _engine
    if _engine is not None:
        logger.warning("Database engine already initialized")
        return

    settings = get_settings()
    engine = create_async_engine(settings.database_url, **_engine_options(settings))
    try:
        if settings.DB_AUTO_CREATE_TABLES:
            await create_tables(engine)
    except Exception as e:
        logger.error(f"Database startup failed: {e}", exc_info=True)
        await engine.dispose()
        raise

    _engine = engine
    logger.info(f"Database engine ready ({engine.url.get_backend_name()})")


async def close_database() -> None:
    global _engine
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    logger.info("Database engine disposed")


def get_database_engine() -> AsyncEngine:
    """
    Return the shared engine.

    Raises:
        RuntimeError: If initialize_database() has not run
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call initialize_database() first.")
    return _engine


async def database_health_check() -> Dict[str, Any]:
    """Run ``SELECT 1`` with a short backoff between attempts."""
    if _engine is None:
        return {"status": "unhealthy", "error": "Database engine not initialized", "timestamp": _checked_at()}

    last_error = ""
    for attempt in range(1, HEALTH_CHECK_ATTEMPTS + 1):
        try:
            async with _engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "healthy", "timestamp": _checked_at()}
        except Exception as e:
            last_error = str(e)
            logger.warning(f"Database ping failed ({attempt}/{HEALTH_CHECK_ATTEMPTS}): {e}")
            if attempt < HEALTH_CHECK_ATTEMPTS:
                await asyncio.sleep(HEALTH_CHECK_BACKOFF_SECONDS * attempt)

    return {"status": "unhealthy", "error": last_error, "timestamp": _checked_at()}
