# 📄 File: patient_api/modules/payments/domain/models/subscription.py
# 🧭 Purpose (Layman Explanation):
# Describes a patient's access to the consultation: whether they got it free, paid for it or
# are still paying, and until when it lasts.
# 🧪 Purpose (Technical Summary):
# Domain model for the single per-user subscription record and the access rule
# (status active and not expired) that gates consultation content.
# 🔗 Dependencies:
# pydantic, datetime, enum
# 🔄 Connected Modules / Calls From:
# subscription repository, payment/registration/webhook services, access dependency

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SubscriptionType(str, Enum):
    """How access was obtained"""
    FREE = "free"
    PAID = "paid"
    PENDING = "pending"  # Registered, checkout not completed


class SubscriptionStatus(str, Enum):
    """Subscription status enumeration"""
    ACTIVE = "active"
    PENDING = "pending"


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps (SQLite) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class Subscription(BaseModel):
    """
    Subscription domain model.

    There is at most one record per user. ``amount_paid`` is in major currency
    units and ``currency`` is a lowercase ISO code.
    """
    model_config = ConfigDict(use_enum_values=False, from_attributes=True)

    id: str
    user_id: str
    subscription_type: SubscriptionType = SubscriptionType.PENDING
    status: SubscriptionStatus = SubscriptionStatus.PENDING
    expires_at: Optional[datetime] = None
    amount_paid: Optional[float] = None
    currency: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    stripe_session_id: Optional[str] = None
    welcome_email_sent: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == SubscriptionStatus.ACTIVE

    @property
    def is_free(self) -> bool:
        return self.subscription_type == SubscriptionType.FREE and self.is_active

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        expires_at = as_utc(self.expires_at)
        if expires_at is None:
            return False
        return expires_at <= (now or datetime.now(timezone.utc))

    def grants_access(self, now: Optional[datetime] = None) -> bool:
        """Access requires an active status and no past expiry."""
        return self.is_active and not self.is_expired(now)
