# 📄 File: patient_api/modules/consultation/domain/models/progress.py
# 🧭 Purpose (Layman Explanation):
# Records which questionnaire pages a patient has finished and when.
# 🧪 Purpose (Technical Summary):
# Domain model for per-module completion state read from user_progress.
# 🔗 Dependencies:
# pydantic, datetime
# 🔄 Connected Modules / Calls From:
# response repository, response service, consultation API

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ModuleProgress(BaseModel):
    """Completion state of one module for one user"""

    module_name: str
    completed: bool = False
    completed_at: Optional[datetime] = None
