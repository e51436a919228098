# 📄 File: patient_api/modules/payments/infrastructure/database/models.py
# 🧭 Purpose (Layman Explanation):
# Defines the database tables that remember who has access to the consultation and which
# payment notifications from Stripe have already been handled.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy ORM models for user_subscriptions (unique per user) and webhook_events
# (unique per Stripe event id).
#
# 🔗 Dependencies:
# - SQLAlchemy ORM
# - patient_api.shared.infrastructure.database.connection (declarative base)
#
# 🔄 Connected Modules / Calls From:
# - subscription_repository_impl.py
# - Alembic migrations (schema generation)

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Numeric, String

from patient_api.shared.infrastructure.database.connection import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _uuid() -> str:
    return str(uuid4())


class UserSubscriptionModel(Base):
    """Access rights of one user."""
    __tablename__ = "user_subscriptions"

    id = Column(
        String(36),
        primary_key=True,
        default=_uuid,
        comment="Unique identifier for each subscription"
    )
    user_id = Column(
        String(36),
        nullable=False,
        unique=True,
        index=True,
        comment="Supabase auth user id"
    )
    subscription_type = Column(
        String(16),
        nullable=False,
        default="pending",
        comment="free, paid or pending"
    )
    status = Column(
        String(16),
        nullable=False,
        default="pending",
        comment="active or pending"
    )
    expires_at = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="End of access; null never expires"
    )
    amount_paid = Column(
        Numeric(10, 2),
        nullable=True,
        comment="Amount paid in major currency units"
    )
    currency = Column(
        String(3),
        nullable=True,
        comment="Lowercase ISO currency code"
    )
    stripe_customer_id = Column(String(255), nullable=True)
    stripe_session_id = Column(String(255), nullable=True)
    welcome_email_sent = Column(
        Boolean,
        nullable=False,
        default=False,
        comment="Set once the welcome email has gone out"
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<UserSubscriptionModel(user_id={self.user_id}, type={self.subscription_type}, "
            f"status={self.status})>"
        )


class WebhookEventModel(Base):
    """A Stripe event that has been processed."""
    __tablename__ = "webhook_events"

    id = Column(String(36), primary_key=True, default=_uuid)
    stripe_event_id = Column(
        String(255),
        nullable=False,
        unique=True,
        comment="Stripe event id, e.g. evt_..."
    )
    event_type = Column(String(100), nullable=False)
    processed_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow
    )

    def __repr__(self) -> str:
        return f"<WebhookEventModel(stripe_event_id={self.stripe_event_id}, type={self.event_type})>"
