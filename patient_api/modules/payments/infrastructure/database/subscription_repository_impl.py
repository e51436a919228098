# 📄 File: patient_api/modules/payments/infrastructure/database/subscription_repository_impl.py
# 🧭 Purpose (Layman Explanation):
# Does the actual reading and writing of subscription records and processed Stripe events.
# 🧪 Purpose (Technical Summary):
# SQLAlchemy implementations of SubscriptionRepository and WebhookEventRepository. Upserts
# are keyed on the unique user_id column and absorb a concurrent insert through a savepoint;
# a duplicate create surfaces as ConflictError.
# 🔗 Dependencies:
# SQLAlchemy, patient_api.shared.infrastructure.database.session, patient_api.shared.core.exceptions
# 🔄 Connected Modules / Calls From:
# Payment, registration and webhook services, welcome email service, access dependency

import logging
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from patient_api.modules.payments.domain.models.subscription import Subscription
from patient_api.modules.payments.domain.repositories.subscription_repository import (
    SubscriptionRepository,
    WebhookEventRepository,
)
from patient_api.modules.payments.infrastructure.database.models import (
    UserSubscriptionModel,
    WebhookEventModel,
)
from patient_api.shared.core.exceptions import ConflictError, DatabaseError
from patient_api.shared.infrastructure.database.session import get_db_session

logger = logging.getLogger(__name__)

_WRITABLE_FIELDS = {
    "subscription_type",
    "status",
    "expires_at",
    "amount_paid",
    "currency",
    "stripe_customer_id",
    "stripe_session_id",
    "welcome_email_sent",
}


def _column_values(subscription_data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep known columns and store enum members by value."""
    values = {}
    for key, value in subscription_data.items():
        if key not in _WRITABLE_FIELDS:
            continue
        values[key] = value.value if isinstance(value, Enum) else value
    return values


class SubscriptionRepositoryImpl(SubscriptionRepository):
    """
    SQLAlchemy implementation of subscription repository.
    """

    def __init__(self, session: AsyncSession = Depends(get_db_session)):
        """
        Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session
        """
        self.session = session

    async def _get_model(self, user_id: str) -> Optional[UserSubscriptionModel]:
        query = select(UserSubscriptionModel).where(UserSubscriptionModel.user_id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_user_id(self, user_id: str) -> Optional[Subscription]:
        try:
            model = await self._get_model(user_id)
            return Subscription.model_validate(model) if model else None

        except SQLAlchemyError as e:
            logger.error(f"Database error getting subscription for user {user_id}: {e}")
            raise DatabaseError(
                "Failed to retrieve subscription",
                operation="select",
                table="user_subscriptions"
            )

    async def create(self, user_id: str, subscription_data: Dict[str, Any]) -> Subscription:
        """
        Insert a subscription record.

        Raises:
            ConflictError: If the user already has a record
            DatabaseError: If the insert fails
        """
        try:
            model = UserSubscriptionModel(user_id=user_id, **_column_values(subscription_data))
            self.session.add(model)
            await self.session.flush()
            await self.session.refresh(model)

            logger.info(f"Created {model.subscription_type} subscription for user {user_id}")
            return Subscription.model_validate(model)

        except IntegrityError:
            await self.session.rollback()
            logger.warning(f"Subscription already exists for user {user_id}")
            raise ConflictError(
                "Subscription already exists",
                resource_type="subscription",
                conflict_field="user_id",
                existing_value=user_id
            )
        except SQLAlchemyError as e:
            logger.error(f"Database error creating subscription for user {user_id}: {e}")
            raise DatabaseError(
                "Failed to create subscription",
                operation="insert",
                table="user_subscriptions"
            )

    async def _insert_or_reload(self, user_id: str, values: Dict[str, Any]) -> UserSubscriptionModel:
        # Savepoint keeps the request transaction usable if another request inserted first
        try:
            async with self.session.begin_nested():
                model = UserSubscriptionModel(user_id=user_id, **values)
                self.session.add(model)
                await self.session.flush()
            return model

        except IntegrityError:
            logger.info(f"Subscription for user {user_id} was inserted concurrently, updating it")
            model = await self._get_model(user_id)
            if model is None:
                raise
            return model

    async def upsert(self, user_id: str, subscription_data: Dict[str, Any]) -> Subscription:
        """
        Create the user's subscription record or update it in place.

        Verify-payment and the checkout webhook often arrive together; when both see no
        record, the second insert hits the unique user_id and becomes an update.

        Raises:
            DatabaseError: If the write fails
        """
        try:
            values = _column_values(subscription_data)
            model = await self._get_model(user_id)
            if model is None:
                model = await self._insert_or_reload(user_id, values)

            for key, value in values.items():
                setattr(model, key, value)

            await self.session.flush()
            await self.session.refresh(model)

            logger.info(f"Upserted subscription for user {user_id}: {model.subscription_type}/{model.status}")
            return Subscription.model_validate(model)

        except SQLAlchemyError as e:
            logger.error(f"Database error upserting subscription for user {user_id}: {e}")
            raise DatabaseError(
                "Failed to save subscription",
                operation="upsert",
                table="user_subscriptions"
            )

    async def mark_welcome_email_sent(self, user_id: str) -> bool:
        try:
            model = await self._get_model(user_id)
            if model is None:
                return False

            model.welcome_email_sent = True
            await self.session.flush()
            return True

        except SQLAlchemyError as e:
            logger.error(f"Database error flagging welcome email for user {user_id}: {e}")
            raise DatabaseError(
                "Failed to update subscription",
                operation="update",
                table="user_subscriptions"
            )


class WebhookEventRepositoryImpl(WebhookEventRepository):
    """SQLAlchemy implementation of the processed webhook event log."""

    def __init__(self, session: AsyncSession = Depends(get_db_session)):
        self.session = session

    async def exists(self, event_id: str) -> bool:
        try:
            query = select(WebhookEventModel.id).where(WebhookEventModel.stripe_event_id == event_id)
            result = await self.session.execute(query)
            return result.scalar_one_or_none() is not None

        except SQLAlchemyError as e:
            logger.error(f"Database error checking webhook event {event_id}: {e}")
            raise DatabaseError(
                "Failed to check webhook event",
                operation="select",
                table="webhook_events"
            )

    async def record(self, event_id: str, event_type: str) -> None:
        """
        Record an event.

        Raises:
            ConflictError: If the event was recorded concurrently
        """
        try:
            self.session.add(WebhookEventModel(stripe_event_id=event_id, event_type=event_type))
            await self.session.flush()

        except IntegrityError:
            await self.session.rollback()
            raise ConflictError(
                "Webhook event already processed",
                resource_type="webhook_event",
                conflict_field="stripe_event_id",
                existing_value=event_id
            )
        except SQLAlchemyError as e:
            logger.error(f"Database error recording webhook event {event_id}: {e}")
            raise DatabaseError(
                "Failed to record webhook event",
                operation="insert",
                table="webhook_events"
            )
