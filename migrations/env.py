# 📄 File: migrations/env.py
# 🧭 Purpose (Layman Explanation):
# Tells Alembic where the consultation database lives and which tables belong to this app,
# so schema changes are applied to our tables and never to the ones Supabase looks after.
# 🧪 Purpose (Technical Summary):
# Alembic environment: reads the async URL from Settings (DATABASE_URL / DB_*), registers the
# consultation and payments ORM tables on Base.metadata and runs migrations over asyncpg.
# 🔗 Dependencies:
# alembic, SQLAlchemy async engine, asyncpg, patient_api.shared.config.settings
# 🔄 Connected Modules / Calls From:
# alembic CLI (upgrade, downgrade, revision --autogenerate)

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from patient_api.modules.consultation.infrastructure.database import models as consultation_models  # noqa: F401
from patient_api.modules.payments.infrastructure.database import models as payment_models  # noqa: F401
from patient_api.shared.config.settings import get_settings
from patient_api.shared.infrastructure.database.connection import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Owned by Supabase, never diffed or migrated from here
MANAGED_SCHEMAS = frozenset({"auth", "storage", "realtime", "vault", "extensions"})


def include_object(obj, name, type_, reflected, compare_to) -> bool:
    return getattr(obj, "schema", None) not in MANAGED_SCHEMAS


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        include_object=include_object,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL as a script instead of executing it."""
    _configure(
        url=get_settings().database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(
        get_settings().database_url,
        poolclass=pool.NullPool,
        connect_args={"statement_cache_size": 0},
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
