# 📄 File: patient_api/modules/payments/domain/services/webhook_service.py
# 🧭 Purpose (Layman Explanation):
# Listens for Stripe's "payment finished" notifications, switches on the patient's access and
# sends their welcome email. Each notification is handled only once.
# 🧪 Purpose (Technical Summary):
# Stripe webhook processing: signature verification, event-level idempotency through the
# webhook_events table, and activation of the subscription on checkout.session.completed.
# The user is taken from session metadata, falling back to a lookup by customer email.
# 🔗 Dependencies:
# StripeGateway, SubscriptionRepository, WebhookEventRepository, SupabaseAuthGateway,
# WelcomeEmailService
# 🔄 Connected Modules / Calls From:
# patient_api.modules.payments.presentation.api.v1.payments (POST /webhook)

import logging
from typing import Optional

from fastapi import Depends
from pydantic import BaseModel

from patient_api.modules.notifications.domain.services.welcome_service import WelcomeEmailService
from patient_api.modules.payments.domain.repositories.subscription_repository import (
    SubscriptionRepository,
    WebhookEventRepository,
)
from patient_api.modules.payments.domain.services.payment_service import paid_subscription_data
from patient_api.modules.payments.infrastructure.external.stripe_gateway import (
    CheckoutSessionInfo,
    StripeGateway,
    checkout_session_from_stripe,
    get_stripe_gateway,
)
from patient_api.shared.core.exceptions import PatientPortalException
from patient_api.shared.infrastructure.external.supabase_auth import (
    SupabaseAuthGateway,
    get_supabase_auth_gateway,
)

logger = logging.getLogger(__name__)

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


class WebhookResult(BaseModel):
    received: bool = True
    processed: bool = True
    reason: Optional[str] = None


class WebhookService:
    """Processes verified Stripe webhook events exactly once."""

    def __init__(
        self,
        subscription_repository: SubscriptionRepository = Depends(),
        webhook_event_repository: WebhookEventRepository = Depends(),
        stripe_gateway: StripeGateway = Depends(get_stripe_gateway),
        auth_gateway: SupabaseAuthGateway = Depends(get_supabase_auth_gateway),
        welcome_email_service: WelcomeEmailService = Depends(),
    ):
        self.subscription_repository = subscription_repository
        self.webhook_event_repository = webhook_event_repository
        self.stripe_gateway = stripe_gateway
        self.auth_gateway = auth_gateway
        self.welcome_email_service = welcome_email_service

    async def handle(self, payload: bytes, signature: Optional[str]) -> WebhookResult:
        """
        Verify and process a webhook delivery.

        Raises:
            BadRequestError: If the signature is missing or invalid
            ConfigurationError: If the webhook secret is not configured
        """
        event = self.stripe_gateway.construct_webhook_event(payload, signature)
        logger.info(f"Webhook signature verified: {event.type} {event.id}")

        if await self.webhook_event_repository.exists(event.id):
            logger.info(f"Event already processed: {event.id}")
            return WebhookResult(processed=False, reason="duplicate")

        await self.webhook_event_repository.record(event.id, event.type)

        if event.type != CHECKOUT_SESSION_COMPLETED:
            return WebhookResult()

        return await self._handle_checkout_completed(checkout_session_from_stripe(event.data_object))

    async def _handle_checkout_completed(self, session: CheckoutSessionInfo) -> WebhookResult:
        logger.info(
            f"Processing checkout.session.completed: session={session.id} customer={session.customer_id} "
            f"status={session.payment_status} amount={session.amount_total} currency={session.currency}"
        )

        if not session.is_paid or not session.customer_id:
            return WebhookResult()

        customer = await self.stripe_gateway.retrieve_customer(session.customer_id)
        if customer.deleted:
            logger.info(f"Customer {session.customer_id} was deleted")
            return WebhookResult(processed=False, reason="customer_deleted")
        if not customer.email:
            logger.info(f"No email for customer {session.customer_id}")
            return WebhookResult(processed=False, reason="no_email")

        user = await self.auth_gateway.find_user_by_email(customer.email)
        user_id = session.metadata.get("user_id") or (user.id if user else None)
        if not user_id:
            logger.info(f"User not found for customer email {customer.email}")
            return WebhookResult(processed=False, reason="user_not_found")

        existing = await self.subscription_repository.get_by_user_id(user_id)
        if existing is not None and existing.grants_access():
            logger.info(f"Subscription already active via webhook for user {user_id}")
            return WebhookResult()

        await self.subscription_repository.upsert(
            user_id,
            paid_subscription_data(session.customer_id, session.id, session.amount_total, session.currency),
        )
        logger.info(f"Subscription activated via webhook for user {user_id}")

        try:
            await self.welcome_email_service.send_welcome_email(
                user_id=user_id,
                email=customer.email,
                first_name=user.first_name if user else None,
                is_paid=bool(session.amount_total),
            )
        except PatientPortalException as e:
            logger.error(f"Error sending welcome email via webhook for user {user_id}: {e.message}")

        return WebhookResult()
