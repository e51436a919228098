# 📄 File: patient_api/modules/consultation/infrastructure/database/response_repository_impl.py
# 🧭 Purpose (Layman Explanation):
# Does the actual reading and writing of questionnaire answers in the database, swapping
# a page's old answers for the new ones in one go.
# 🧪 Purpose (Technical Summary):
# SQLAlchemy implementation of ResponseRepository. A save deletes the module's rows and inserts
# the new set inside the request transaction, so readers never see a merged set.
# 🔗 Dependencies:
# SQLAlchemy, patient_api.shared.infrastructure.database.session, patient_api.shared.core.exceptions
# 🔄 Connected Modules / Calls From:
# Response service, consultation API, document service

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List

from fastapi import Depends
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from patient_api.modules.consultation.domain.models.progress import ModuleProgress
from patient_api.modules.consultation.domain.repositories.response_repository import ResponseRepository
from patient_api.modules.consultation.infrastructure.database.models import (
    UserProgressModel,
    UserResponseModel,
)
from patient_api.shared.core.exceptions import DatabaseError
from patient_api.shared.infrastructure.database.session import get_db_session

logger = logging.getLogger(__name__)


class ResponseRepositoryImpl(ResponseRepository):
    """
    SQLAlchemy implementation of response repository.
    Handles consultation answers and module progress with proper error handling.
    """

    def __init__(self, session: AsyncSession = Depends(get_db_session)):
        """
        Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session
        """
        self.session = session

    async def get_module_responses(self, user_id: str, module_name: str) -> Dict[str, str]:
        try:
            query = select(UserResponseModel).where(
                UserResponseModel.user_id == user_id,
                UserResponseModel.module_name == module_name,
            )
            result = await self.session.execute(query)
            return {row.question_id: row.response_value for row in result.scalars().all()}

        except SQLAlchemyError as e:
            logger.error(f"Database error loading {module_name} responses for user {user_id}: {e}")
            raise DatabaseError(
                "Failed to load responses",
                operation="select",
                table="user_responses"
            )

    async def get_all_responses(self, user_id: str) -> Dict[str, Dict[str, str]]:
        try:
            query = select(UserResponseModel).where(UserResponseModel.user_id == user_id)
            result = await self.session.execute(query)

            grouped: Dict[str, Dict[str, str]] = defaultdict(dict)
            for row in result.scalars().all():
                grouped[row.module_name][row.question_id] = row.response_value
            return dict(grouped)

        except SQLAlchemyError as e:
            logger.error(f"Database error loading responses for user {user_id}: {e}")
            raise DatabaseError(
                "Failed to load responses",
                operation="select",
                table="user_responses"
            )

    async def replace_module_responses(
        self,
        user_id: str,
        module_name: str,
        responses: Dict[str, str],
        response_types: Dict[str, str]
    ) -> None:
        """
        Replace a module's answers with a new set.

        Args:
            user_id: Supabase user id
            module_name: Module id
            responses: Question id to answer value
            response_types: Question id to response type
        """
        try:
            await self.session.execute(
                delete(UserResponseModel).where(
                    UserResponseModel.user_id == user_id,
                    UserResponseModel.module_name == module_name,
                )
            )

            self.session.add_all([
                UserResponseModel(
                    user_id=user_id,
                    module_name=module_name,
                    question_id=question_id,
                    response_value=value,
                    response_type=response_types.get(question_id, "text"),
                )
                for question_id, value in responses.items()
            ])
            await self.session.flush()

            logger.info(f"Stored {len(responses)} responses for {module_name} (user {user_id})")

        except SQLAlchemyError as e:
            logger.error(f"Database error saving {module_name} responses for user {user_id}: {e}")
            raise DatabaseError(
                "Failed to save responses",
                operation="replace",
                table="user_responses"
            )

    async def mark_module_completed(self, user_id: str, module_name: str) -> ModuleProgress:
        try:
            query = select(UserProgressModel).where(
                UserProgressModel.user_id == user_id,
                UserProgressModel.module_name == module_name,
            )
            result = await self.session.execute(query)
            progress = result.scalar_one_or_none()

            now = datetime.now(timezone.utc)
            if progress is None:
                progress = UserProgressModel(user_id=user_id, module_name=module_name)
                self.session.add(progress)

            progress.completed = True
            progress.completed_at = now
            await self.session.flush()

            return ModuleProgress(
                module_name=module_name,
                completed=True,
                completed_at=now,
            )

        except SQLAlchemyError as e:
            logger.error(f"Database error updating progress for {module_name} (user {user_id}): {e}")
            raise DatabaseError(
                "Failed to update progress",
                operation="upsert",
                table="user_progress"
            )

    async def get_progress(self, user_id: str) -> List[ModuleProgress]:
        try:
            query = select(UserProgressModel).where(UserProgressModel.user_id == user_id)
            result = await self.session.execute(query)
            return [
                ModuleProgress(
                    module_name=row.module_name,
                    completed=row.completed,
                    completed_at=row.completed_at,
                )
                for row in result.scalars().all()
            ]

        except SQLAlchemyError as e:
            logger.error(f"Database error loading progress for user {user_id}: {e}")
            raise DatabaseError(
                "Failed to load progress",
                operation="select",
                table="user_progress"
            )
