# 📄 File: patient_api/modules/consultation/infrastructure/database/models.py
# 🧭 Purpose (Layman Explanation):
# Defines the database tables that hold each patient's questionnaire answers and which
# pages they have finished.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy ORM models for user_responses and user_progress, with the unique keys that
# make a response set per (user, module) and one progress row per (user, module).
#
# 🔗 Dependencies:
# - SQLAlchemy ORM
# - patient_api.shared.infrastructure.database.connection (declarative base)
#
# 🔄 Connected Modules / Calls From:
# - response_repository_impl.py (CRUD operations)
# - Alembic migrations (schema generation)

"""
SQLAlchemy Models for Consultation

Models:
- UserResponseModel: one answer to one question
- UserProgressModel: completion of one module

User ids are Supabase auth user ids stored as strings.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, String, Text, UniqueConstraint

from patient_api.shared.infrastructure.database.connection import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _uuid() -> str:
    return str(uuid4())


class UserResponseModel(Base):
    """A stored answer to a consultation question."""
    __tablename__ = "user_responses"
    __table_args__ = (
        UniqueConstraint("user_id", "module_name", "question_id", name="uq_user_responses_user_module_question"),
    )

    id = Column(
        String(36),
        primary_key=True,
        default=_uuid,
        comment="Unique identifier for each response"
    )
    user_id = Column(
        String(36),
        nullable=False,
        index=True,
        comment="Supabase auth user id"
    )
    module_name = Column(
        String(32),
        nullable=False,
        comment="Consultation module id, e.g. module_2a"
    )
    question_id = Column(
        String(64),
        nullable=False,
        comment="Question identifier within the module"
    )
    response_value = Column(
        Text,
        nullable=False,
        comment="Free text answer or the chosen option"
    )
    response_type = Column(
        String(32),
        nullable=False,
        default="text",
        comment="text or multiple_choice"
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        comment="Answer creation time"
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        comment="Last update time"
    )

    def __repr__(self) -> str:
        return f"<UserResponseModel(user_id={self.user_id}, module={self.module_name}, question={self.question_id})>"


class UserProgressModel(Base):
    """Completion state of a consultation module."""
    __tablename__ = "user_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "module_name", name="uq_user_progress_user_module"),
    )

    id = Column(
        String(36),
        primary_key=True,
        default=_uuid,
        comment="Unique identifier for each progress row"
    )
    user_id = Column(
        String(36),
        nullable=False,
        index=True,
        comment="Supabase auth user id"
    )
    module_name = Column(
        String(32),
        nullable=False,
        comment="Consultation module id"
    )
    completed = Column(
        Boolean,
        nullable=False,
        default=False,
        comment="Whether the module has been saved"
    )
    completed_at = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the module was last completed"
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        comment="Row creation time"
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        comment="Last update time"
    )

    def __repr__(self) -> str:
        return f"<UserProgressModel(user_id={self.user_id}, module={self.module_name}, completed={self.completed})>"
