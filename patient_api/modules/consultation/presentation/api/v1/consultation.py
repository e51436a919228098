# 📄 File: patient_api/modules/consultation/presentation/api/v1/consultation.py
# 🧭 Purpose (Layman Explanation):
# The web endpoints for the questionnaire itself: listing pages, showing a page with the
# patient's saved answers, saving answers and showing how far along the patient is.
#
# 🧪 Purpose (Technical Summary):
# FastAPI consultation endpoints over the static catalog, progress derivation and
# ResponseService. Catalog and progress are public; everything touching a patient's answers
# requires an active subscription.
#
# 🔗 Dependencies:
# - FastAPI router
# - consultation catalog, progress_service, ResponseService, consultation schemas
# - payments require_active_subscription dependency
#
# 🔄 Connected Modules / Calls From:
# - patient_api.api.v1.router (mounted at /consultation)

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from patient_api.modules.consultation.domain.catalog import CONSULTATION_MODULES
from patient_api.modules.consultation.domain.services.progress_service import derive_progress
from patient_api.modules.consultation.domain.services.response_service import (
    ConsultationSummary,
    ResponseService,
    resolve_module,
)
from patient_api.modules.consultation.presentation.api.schemas.consultation_schemas import (
    AllResponsesResponse,
    ModuleDetailResponse,
    ModuleListItem,
    ModuleListResponse,
    ProgressResponse,
    SaveResponsesRequest,
    SaveResponsesResponse,
)
from patient_api.modules.payments.presentation.dependencies import require_active_subscription
from patient_api.shared.core.dependencies import CurrentUser

logger = logging.getLogger(__name__)

consultation_router = APIRouter()


@consultation_router.get(
    "/modules",
    response_model=ModuleListResponse,
    summary="List consultation modules",
    description="The consultation modules in the order they are presented",
)
async def list_modules() -> ModuleListResponse:
    items = [ModuleListItem.from_domain(module) for module in CONSULTATION_MODULES]
    return ModuleListResponse(modules=items, total=len(items))


@consultation_router.get(
    "/progress",
    response_model=ProgressResponse,
    summary="Derive progress",
    description="Step number, percentage and neighbouring routes for a consultation route",
)
async def get_progress(
    path: Optional[str] = Query(None, description="Route path such as /consultation/module-2a")
) -> ProgressResponse:
    progress = derive_progress(path)
    return ProgressResponse(path=path, visible=progress is not None, progress=progress)


@consultation_router.get(
    "/modules/{module_id}",
    response_model=ModuleDetailResponse,
    summary="Get module",
    description="A module's questions with the caller's saved answers",
    responses={402: {"description": "Active subscription required"}, 404: {"description": "Unknown module"}}
)
async def get_module_detail(
    module_id: str,
    current_user: CurrentUser = Depends(require_active_subscription),
    response_service: ResponseService = Depends(),
) -> ModuleDetailResponse:
    module = resolve_module(module_id)
    responses = await response_service.get_module_responses(current_user.user_id, module.id)
    progress = (await response_service.get_progress(current_user.user_id)).get(module.id)

    return ModuleDetailResponse(
        module=module,
        responses=responses,
        completed=bool(progress and progress.completed),
        completed_at=progress.completed_at if progress else None,
        progress=derive_progress(module.route),
    )


@consultation_router.put(
    "/modules/{module_id}/responses",
    response_model=SaveResponsesResponse,
    summary="Save module responses",
    description="Replace the caller's answers for a module and mark it completed",
    responses={
        402: {"description": "Active subscription required"},
        404: {"description": "Unknown module"},
        422: {"description": "Unknown question, invalid option or answer too long"},
    }
)
async def save_module_responses(
    module_id: str,
    payload: SaveResponsesRequest,
    current_user: CurrentUser = Depends(require_active_subscription),
    response_service: ResponseService = Depends(),
) -> SaveResponsesResponse:
    saved = await response_service.save_module_responses(current_user.user_id, module_id, payload.responses)
    step = derive_progress(resolve_module(saved.module_id).route)

    return SaveResponsesResponse(
        module_id=saved.module_id,
        responses=saved.responses,
        completed_at=saved.progress.completed_at,
        unanswered_required=saved.unanswered_required,
        next_route=step.next_route if step else None,
    )


@consultation_router.get(
    "/responses",
    response_model=AllResponsesResponse,
    summary="All responses",
    description="Every saved answer of the caller, grouped by module",
    responses={402: {"description": "Active subscription required"}}
)
async def get_all_responses(
    current_user: CurrentUser = Depends(require_active_subscription),
    response_service: ResponseService = Depends(),
) -> AllResponsesResponse:
    return AllResponsesResponse(responses=await response_service.get_all_responses(current_user.user_id))


@consultation_router.get(
    "/summary",
    response_model=ConsultationSummary,
    summary="Consultation summary",
    description="Answers with their question texts for every module, plus the Greene Scale score",
    responses={402: {"description": "Active subscription required"}}
)
async def get_summary(
    current_user: CurrentUser = Depends(require_active_subscription),
    response_service: ResponseService = Depends(),
) -> ConsultationSummary:
    return await response_service.build_summary(current_user.user_id)
