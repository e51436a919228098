# 📄 File: patient_api/modules/consultation/domain/services/progress_service.py
# 🧭 Purpose (Layman Explanation):
# Works out "Step 3 of 9, 33% complete" from the page the patient is on, and which pages
# come before and after it.
# 🧪 Purpose (Technical Summary):
# Pure, stateless step derivation over the ordered module routes. Paths outside the module
# list derive no progress, which the client renders as "no progress bar".
# 🔗 Dependencies:
# consultation catalog, pydantic
# 🔄 Connected Modules / Calls From:
# consultation API (progress and module endpoints)

from typing import Optional

from pydantic import BaseModel

from patient_api.modules.consultation.domain.catalog import (
    CONSULTATION_MODULES,
    MODULE_ROUTE_PREFIX,
    SUMMARY_ROUTE,
)


class StepProgress(BaseModel):
    """Where a route sits in the consultation."""

    module_id: str
    route: str
    title: str
    step: int
    total_steps: int
    percentage: float
    previous_route: Optional[str] = None
    next_route: str


def normalize_path(path: str) -> str:
    """Drop a trailing slash; the root path is left as is."""
    if len(path) > 1 and path.endswith("/"):
        return path.rstrip("/") or "/"
    return path


def derive_progress(path: Optional[str]) -> Optional[StepProgress]:
    """
    Derive the consultation step for a route path.

    Args:
        path: Route path such as ``/consultation/module-2b``

    Returns:
        Optional[StepProgress]: The step, or None when the path is not a consultation module
    """
    if not path:
        return None

    path = normalize_path(path)
    if not path.startswith(MODULE_ROUTE_PREFIX):
        return None

    routes = [module.route for module in CONSULTATION_MODULES]
    if path not in routes:
        return None

    index = routes.index(path)
    total = len(routes)
    module = CONSULTATION_MODULES[index]

    return StepProgress(
        module_id=module.id,
        route=module.route,
        title=module.title,
        step=index + 1,
        total_steps=total,
        percentage=round((index + 1) / total * 100, 2),
        previous_route=routes[index - 1] if index > 0 else None,
        next_route=routes[index + 1] if index + 1 < total else SUMMARY_ROUTE,
    )
