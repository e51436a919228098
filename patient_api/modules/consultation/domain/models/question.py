# 📄 File: patient_api/modules/consultation/domain/models/question.py
# 🧭 Purpose (Layman Explanation):
# Describes the building blocks of the questionnaire: a question (typed answer or pick one option)
# and a module, which is one page of related questions.
# 🧪 Purpose (Technical Summary):
# Frozen pydantic domain models for the static consultation catalog, with the answer validation
# rules each question enforces.
# 🔗 Dependencies:
# pydantic, enum
# 🔄 Connected Modules / Calls From:
# consultation catalog, response service, Greene scale scoring, consultation API schemas

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class QuestionType(str, Enum):
    """How a question is answered"""
    TEXT = "text"
    MULTIPLE_CHOICE = "multiple_choice"


class Question(BaseModel):
    """
    A single questionnaire question.

    Multiple choice questions allow exactly one of ``options``; their order runs
    from "no change" to "severe".
    """
    model_config = ConfigDict(frozen=True)

    id: str
    type: QuestionType = QuestionType.TEXT
    question: str
    options: List[str] = Field(default_factory=list)
    max_length: int = 1000
    section: Optional[str] = None
    required: bool = False

    @property
    def is_multiple_choice(self) -> bool:
        return self.type == QuestionType.MULTIPLE_CHOICE

    def validation_error(self, value: str) -> Optional[str]:
        """
        Check an answer against this question.

        Returns:
            Optional[str]: A description of the problem, or None when the answer is acceptable
        """
        if self.is_multiple_choice and value not in self.options:
            return f"'{value}' is not one of the options for {self.id}"
        if not self.is_multiple_choice and len(value) > self.max_length:
            return f"Answer for {self.id} exceeds {self.max_length} characters"
        return None


class ConsultationModule(BaseModel):
    """One page of the consultation, identified by module id and route."""
    model_config = ConfigDict(frozen=True)

    id: str
    route: str
    title: str
    page_title: str
    questions: List[Question] = Field(default_factory=list)

    @property
    def is_informational(self) -> bool:
        return not self.questions

    def get_question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    @property
    def question_ids(self) -> List[str]:
        return [question.id for question in self.questions]
