# 📄 File: patient_api/shared/infrastructure/database/session.py
#
# 🧭 Purpose (Layman Explanation):
# Gives every web request its own database "conversation". When the request finishes well all
# saved answers and subscription changes are kept; if anything fails none of them are.
#
# 🧪 Purpose (Technical Summary):
# Request-scoped AsyncSession provider. The factory is bound to the shared engine at startup;
# get_db_session commits after the handler returns, rolls back on any exception and maps raw
# SQLAlchemy failures onto DatabaseError for the error envelope.
#
# 🔗 Dependencies:
# - sqlalchemy.ext.asyncio (AsyncSession, async_sessionmaker)
# - patient_api/shared/infrastructure/database/connection.py (engine)
#
# 🔄 Connected Modules / Calls From:
# - Repository implementations (Depends(get_db_session))
# - patient_api/main.py (lifespan startup and shutdown)

import logging
from typing import AsyncGenerator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from patient_api.shared.core.exceptions import DatabaseError
from patient_api.shared.infrastructure.database.connection import get_database_engine

logger = logging.getLogger(__name__)


class SessionFactory:
    """Holds the sessionmaker between application startup and shutdown."""

    def __init__(self):
        self._maker: Optional[async_sessionmaker[AsyncSession]] = None

    def bind(self) -> None:
        # Rows stay readable after commit so responses can be built from them
        self._maker = async_sessionmaker(get_database_engine(), expire_on_commit=False)
        logger.info("Session factory bound to database engine")

    def reset(self) -> None:
        self._maker = None

    @property
    def is_initialized(self) -> bool:
        return self._maker is not None

    def open(self) -> AsyncSession:
        if self._maker is None:
            raise DatabaseError("Database sessions are not available", operation="open_session")
        return self._maker()


session_manager = SessionFactory()


def initialize_sessions() -> None:
    session_manager.bind()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one transaction per request.

    Repositories injected into the same request share this session, so a payment
    upsert and the webhook event record are committed together.

    Raises:
        DatabaseError: If the session cannot be opened or a statement fails
    """
    session = session_manager.open()
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Transaction rolled back after database error: {e}")
        raise DatabaseError("Database operation failed", details={"reason": str(e.__class__.__name__)})
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
