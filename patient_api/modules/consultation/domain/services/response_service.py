# 📄 File: patient_api/modules/consultation/domain/services/response_service.py
# 🧭 Purpose (Layman Explanation):
# Checks a patient's answers for a questionnaire page (right questions, allowed choices,
# not too long), saves them and marks the page as done.
# 🧪 Purpose (Technical Summary):
# Domain service for the response context: validation against the static catalog, full-replace
# saves with progress upsert, and read models for module pages and the consultation summary.
# 🔗 Dependencies:
# FastAPI Depends, consultation catalog, ResponseRepository, Greene scale scoring
# 🔄 Connected Modules / Calls From:
# consultation API, notifications document service

import logging
from typing import Dict, List, Optional

from fastapi import Depends
from pydantic import BaseModel

from patient_api.modules.consultation.domain.catalog import CONSULTATION_MODULES, get_module
from patient_api.modules.consultation.domain.models.progress import ModuleProgress
from patient_api.modules.consultation.domain.models.question import ConsultationModule
from patient_api.modules.consultation.domain.repositories.response_repository import ResponseRepository
from patient_api.modules.consultation.domain.services.greene_scale import (
    GreeneScaleResult,
    calculate_greene_scale,
)
from patient_api.shared.core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class SavedModuleResponses(BaseModel):
    module_id: str
    responses: Dict[str, str]
    progress: ModuleProgress
    unanswered_required: List[str]


class AnsweredQuestion(BaseModel):
    question_id: str
    question: str
    section: Optional[str] = None
    answer: Optional[str] = None


class ModuleSummary(BaseModel):
    module_id: str
    title: str
    completed: bool
    answers: List[AnsweredQuestion]


class ConsultationSummary(BaseModel):
    modules: List[ModuleSummary]
    greene_scale: GreeneScaleResult
    completed_modules: int
    total_modules: int


def resolve_module(module_id: str) -> ConsultationModule:
    """
    Look up a module by id.

    Raises:
        NotFoundError: If the module id is not part of the consultation
    """
    module = get_module(module_id)
    if module is None:
        raise NotFoundError(
            f"Unknown consultation module: {module_id}",
            resource_type="consultation_module",
            resource_id=module_id
        )
    return module


def clean_responses(module: ConsultationModule, responses: Dict[str, Optional[str]]) -> Dict[str, str]:
    """
    Validate a submitted response set against the module's questions.

    Answers that are empty after trimming are dropped.

    Raises:
        ValidationError: For unknown question ids, invalid options or over-long text
    """
    cleaned: Dict[str, str] = {}

    for question_id, raw_value in responses.items():
        question = module.get_question(question_id)
        if question is None:
            raise ValidationError(
                f"Question {question_id} does not belong to {module.id}",
                field=question_id,
                constraint="known_question"
            )

        value = (raw_value or "").strip()
        if not value:
            continue

        problem = question.validation_error(value)
        if problem:
            raise ValidationError(
                problem,
                field=question_id,
                constraint="option" if question.is_multiple_choice else "max_length"
            )

        cleaned[question_id] = value

    return cleaned


class ResponseService:
    """
    Domain service for consultation responses.

    A module's answer set is replaced as a whole on every save, never merged.
    """

    def __init__(self, response_repository: ResponseRepository = Depends()):
        self.response_repository = response_repository

    async def save_module_responses(
        self,
        user_id: str,
        module_id: str,
        responses: Dict[str, Optional[str]]
    ) -> SavedModuleResponses:
        """
        Validate and store a module's answers, then mark the module completed.

        Args:
            user_id: Supabase user id
            module_id: Module id such as ``module_2a``
            responses: Question id to answer value

        Returns:
            SavedModuleResponses: The stored mapping and the module's progress
        """
        module = resolve_module(module_id)
        cleaned = clean_responses(module, responses)

        response_types = {
            question_id: module.get_question(question_id).type.value
            for question_id in cleaned
        }

        await self.response_repository.replace_module_responses(
            user_id, module.id, cleaned, response_types
        )
        progress = await self.response_repository.mark_module_completed(user_id, module.id)

        unanswered = [
            question.id for question in module.questions
            if question.required and question.id not in cleaned
        ]
        logger.info(
            f"Saved {module.id} for user {user_id}: {len(cleaned)} answers, "
            f"{len(unanswered)} required unanswered"
        )

        return SavedModuleResponses(
            module_id=module.id,
            responses=cleaned,
            progress=progress,
            unanswered_required=unanswered,
        )

    async def get_module_responses(self, user_id: str, module_id: str) -> Dict[str, str]:
        module = resolve_module(module_id)
        return await self.response_repository.get_module_responses(user_id, module.id)

    async def get_all_responses(self, user_id: str) -> Dict[str, Dict[str, str]]:
        return await self.response_repository.get_all_responses(user_id)

    async def get_flat_responses(self, user_id: str) -> Dict[str, str]:
        """All answers keyed by question id; question ids are unique across modules."""
        flat: Dict[str, str] = {}
        for module_responses in (await self.get_all_responses(user_id)).values():
            flat.update(module_responses)
        return flat

    async def get_progress(self, user_id: str) -> Dict[str, ModuleProgress]:
        rows = await self.response_repository.get_progress(user_id)
        return {row.module_name: row for row in rows}

    async def build_summary(self, user_id: str) -> ConsultationSummary:
        """Answers with question texts for every module, plus the Greene Scale score."""
        all_responses = await self.get_all_responses(user_id)
        progress = await self.get_progress(user_id)

        modules = []
        for module in CONSULTATION_MODULES:
            answers = all_responses.get(module.id, {})
            modules.append(ModuleSummary(
                module_id=module.id,
                title=module.title,
                completed=progress.get(module.id, ModuleProgress(module_name=module.id)).completed,
                answers=[
                    AnsweredQuestion(
                        question_id=question.id,
                        question=question.question,
                        section=question.section,
                        answer=answers.get(question.id),
                    )
                    for question in module.questions
                ],
            ))

        return ConsultationSummary(
            modules=modules,
            greene_scale=calculate_greene_scale(all_responses.get("module_1", {})),
            completed_modules=sum(1 for module in modules if module.completed),
            total_modules=len(modules),
        )
