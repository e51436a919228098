# 📄 File: patient_api/modules/payments/domain/repositories/subscription_repository.py
# 🧭 Purpose (Layman Explanation):
# Defines what the app can do with subscription records: look one up, create one,
# update it in place and remember that the welcome email went out.
# 🧪 Purpose (Technical Summary):
# Abstract repository interfaces for the per-user subscription record and for processed
# Stripe webhook events.
# 🔗 Dependencies:
# - abc (Abstract Base Classes)
# - Subscription domain model
# 🔄 Connected Modules / Calls From:
# - Payment, registration, webhook and welcome email services
# - Repository implementations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from patient_api.modules.payments.domain.models.subscription import Subscription


class SubscriptionRepository(ABC):
    """
    Abstract repository interface for subscription data access operations.

    ``user_id`` is unique: writes either create the user's record or update it.
    """

    @abstractmethod
    async def get_by_user_id(self, user_id: str) -> Optional[Subscription]:
        """Get subscription by user ID."""
        pass

    @abstractmethod
    async def create(self, user_id: str, subscription_data: Dict[str, Any]) -> Subscription:
        """Insert a new subscription record."""
        pass

    @abstractmethod
    async def upsert(self, user_id: str, subscription_data: Dict[str, Any]) -> Subscription:
        """Create the user's record or update it in place."""
        pass

    @abstractmethod
    async def mark_welcome_email_sent(self, user_id: str) -> bool:
        """Set the welcome email flag; returns False when no record exists."""
        pass


class WebhookEventRepository(ABC):
    """Processed webhook events, keyed by the provider's event id."""

    @abstractmethod
    async def exists(self, event_id: str) -> bool:
        """Check whether an event was already recorded."""
        pass

    @abstractmethod
    async def record(self, event_id: str, event_type: str) -> None:
        """Record an event as processed."""
        pass
