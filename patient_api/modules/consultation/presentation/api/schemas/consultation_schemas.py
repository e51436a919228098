# 📄 File: patient_api/modules/consultation/presentation/api/schemas/consultation_schemas.py
# 🧭 Purpose (Layman Explanation):
# Defines what the website sends when saving answers and what it gets back when it asks
# for questions, saved answers or progress.
# 🧪 Purpose (Technical Summary):
# Pydantic request/response schemas for the consultation endpoints.
# 🔗 Dependencies:
# pydantic, consultation domain models
# 🔄 Connected Modules / Calls From:
# patient_api.modules.consultation.presentation.api.v1.consultation

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from patient_api.modules.consultation.domain.models.question import ConsultationModule
from patient_api.modules.consultation.domain.services.progress_service import StepProgress


class ModuleListItem(BaseModel):
    id: str
    route: str
    title: str
    page_title: str
    question_count: int
    informational: bool

    @classmethod
    def from_domain(cls, module: ConsultationModule) -> "ModuleListItem":
        return cls(
            id=module.id,
            route=module.route,
            title=module.title,
            page_title=module.page_title,
            question_count=len(module.questions),
            informational=module.is_informational,
        )


class ModuleListResponse(BaseModel):
    modules: List[ModuleListItem]
    total: int


class ModuleDetailResponse(BaseModel):
    """A module's questions together with the user's saved answers"""

    module: ConsultationModule
    responses: Dict[str, str]
    completed: bool
    completed_at: Optional[datetime] = None
    progress: StepProgress


class SaveResponsesRequest(BaseModel):
    """Full answer set for a module; missing questions are removed from storage"""

    responses: Dict[str, Optional[str]] = Field(
        default_factory=dict,
        description="Question id to answer value"
    )


class SaveResponsesResponse(BaseModel):
    success: bool = True
    module_id: str
    responses: Dict[str, str]
    completed_at: Optional[datetime] = None
    unanswered_required: List[str] = Field(
        default_factory=list,
        description="Multiple choice questions still needing an answer"
    )
    next_route: Optional[str] = None


class AllResponsesResponse(BaseModel):
    responses: Dict[str, Dict[str, str]]


class ProgressResponse(BaseModel):
    """Step derivation for a route; ``visible`` is false outside the module pages"""

    path: Optional[str] = None
    visible: bool
    progress: Optional[StepProgress] = None
