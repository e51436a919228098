# 📄 File: patient_api/modules/consultation/domain/repositories/response_repository.py
# 🧭 Purpose (Layman Explanation):
# Lists what the app needs to do with stored questionnaire answers: read them, replace a page's
# answers and mark a page as finished.
# 🧪 Purpose (Technical Summary):
# Abstract repository interface for consultation responses and module progress.
# 🔗 Dependencies:
# - abc (Abstract Base Classes)
# - ModuleProgress domain model
# 🔄 Connected Modules / Calls From:
# - Response service (business logic)
# - Repository implementation (concrete implementation)

from abc import ABC, abstractmethod
from typing import Dict, List

from patient_api.modules.consultation.domain.models.progress import ModuleProgress


class ResponseRepository(ABC):
    """
    Abstract repository interface for consultation response data access.

    A module's response set is a mapping of question id to answer value.
    """

    @abstractmethod
    async def get_module_responses(self, user_id: str, module_name: str) -> Dict[str, str]:
        """Get one module's answers."""
        pass

    @abstractmethod
    async def get_all_responses(self, user_id: str) -> Dict[str, Dict[str, str]]:
        """Get every stored answer, grouped by module."""
        pass

    @abstractmethod
    async def replace_module_responses(
        self,
        user_id: str,
        module_name: str,
        responses: Dict[str, str],
        response_types: Dict[str, str]
    ) -> None:
        """Replace a module's whole answer set."""
        pass

    @abstractmethod
    async def mark_module_completed(self, user_id: str, module_name: str) -> ModuleProgress:
        """Upsert the module's progress row as completed."""
        pass

    @abstractmethod
    async def get_progress(self, user_id: str) -> List[ModuleProgress]:
        """Get progress rows for every module the user has saved."""
        pass
