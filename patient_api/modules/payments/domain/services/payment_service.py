# 📄 File: patient_api/modules/payments/domain/services/payment_service.py
# 🧭 Purpose (Layman Explanation):
# Handles paying for the consultation: it either gives free access when there is nothing to pay,
# sends the patient to Stripe's checkout page, confirms a finished payment or prices a discount code.
# 🧪 Purpose (Technical Summary):
# Domain service behind create-payment, verify-payment and validate-discount. Subscription writes
# go through SubscriptionRepository upserts keyed on user_id; Stripe access goes through
# StripeGateway.
# 🔗 Dependencies:
# FastAPI Depends, SubscriptionRepository, StripeGateway, discount service, market service, settings
# 🔄 Connected Modules / Calls From:
# patient_api.modules.payments.presentation.api.v1.payments

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from pydantic import BaseModel

from patient_api.modules.markets.domain.services.market_service import detect_market_from_origin
from patient_api.modules.payments.domain.models.subscription import (
    Subscription,
    SubscriptionStatus,
    SubscriptionType,
)
from patient_api.modules.payments.domain.repositories.subscription_repository import SubscriptionRepository
from patient_api.modules.payments.domain.services.discount_service import (
    DiscountQuote,
    apply_coupon,
    from_minor_units,
    is_below_minimum_charge,
    to_minor_units,
)
from patient_api.modules.payments.infrastructure.external.stripe_gateway import (
    StripeGateway,
    get_stripe_gateway,
)
from patient_api.shared.config.settings import get_settings
from patient_api.shared.core.exceptions import AuthorizationError, BadRequestError
from patient_api.shared.core.dependencies import CurrentUser

logger = logging.getLogger(__name__)


class PaymentRedirect(BaseModel):
    url: str
    free_access: bool = False
    session_id: Optional[str] = None


class PaymentVerification(BaseModel):
    success: bool
    verified: bool
    subscription: Optional[Subscription] = None


def paid_subscription_data(
    customer_id: Optional[str],
    session_id: str,
    amount_total: Optional[int],
    currency: Optional[str],
    now: Optional[datetime] = None,
) -> dict:
    """Fields of an active paid subscription created from a completed checkout session."""
    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    return {
        "subscription_type": SubscriptionType.PAID,
        "status": SubscriptionStatus.ACTIVE,
        "stripe_customer_id": customer_id,
        "stripe_session_id": session_id,
        "amount_paid": from_minor_units(amount_total),
        "currency": (currency or settings.DEFAULT_CURRENCY).lower(),
        "expires_at": now + timedelta(days=settings.SUBSCRIPTION_DURATION_DAYS),
    }


class PaymentService:
    """
    Domain service for payments and the subscription record they produce.
    """

    def __init__(
        self,
        subscription_repository: SubscriptionRepository = Depends(),
        stripe_gateway: StripeGateway = Depends(get_stripe_gateway),
    ):
        self.subscription_repository = subscription_repository
        self.stripe_gateway = stripe_gateway
        self.settings = get_settings()

    async def create_payment(
        self,
        user: CurrentUser,
        amount: float,
        origin: Optional[str],
        email: Optional[str] = None,
        discount_code: Optional[str] = None,
    ) -> PaymentRedirect:
        """
        Grant free access or open a Checkout session for the given amount.

        Args:
            user: Authenticated user
            amount: Amount to charge in major units, discounts already applied
            origin: Origin of the calling site; selects the market currency and redirect base
            email: Email used when no Stripe customer exists; defaults to the account email
            discount_code: Code entered by the patient, logged only

        Returns:
            PaymentRedirect: Where to send the browser next
        """
        market = detect_market_from_origin(origin)
        base_url = (origin or self.settings.site_url).rstrip("/")
        currency = market.currency.stripe_code

        if is_below_minimum_charge(amount, self.settings.MIN_CHARGE_AMOUNT):
            logger.info(
                f"Granting free access to user {user.user_id} with amount: {amount}, "
                f"discount code: {discount_code}"
            )
            await self.subscription_repository.upsert(user.user_id, {
                "subscription_type": SubscriptionType.FREE,
                "status": SubscriptionStatus.ACTIVE,
                "amount_paid": 0,
                "currency": currency,
                "expires_at": None,
                "stripe_customer_id": None,
                "stripe_session_id": None,
            })
            return PaymentRedirect(url=f"{base_url}/payment-success?free_access=true", free_access=True)

        customer_email = user.email or email
        customer_id = await self.stripe_gateway.find_customer_id(customer_email) if customer_email else None

        params = {
            "line_items": [{
                "price_data": {
                    "currency": currency,
                    "product_data": {
                        "name": self.settings.PRODUCT_NAME,
                        "description": self.settings.PRODUCT_DESCRIPTION,
                    },
                    "unit_amount": to_minor_units(amount),
                },
                "quantity": 1,
            }],
            "mode": "payment",
            "success_url": f"{base_url}/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{base_url}/payment",
            "metadata": {"user_id": user.user_id},
            "allow_promotion_codes": True,
        }
        if customer_id:
            params["customer"] = customer_id
        elif customer_email:
            params["customer_email"] = customer_email

        session = await self.stripe_gateway.create_checkout_session(params)
        logger.info(f"Checkout session {session.id} created for user {user.user_id} ({market.code.value})")

        return PaymentRedirect(url=session.url, session_id=session.id)

    async def verify_payment(self, user: CurrentUser, session_id: Optional[str]) -> PaymentVerification:
        """
        Confirm a Checkout session and activate the user's subscription.

        The upsert is skipped while the current subscription still grants access, so repeated
        verification never changes or duplicates the record.

        Raises:
            BadRequestError: If no session id is given
            AuthorizationError: If the session was created for another user
        """
        if not session_id:
            raise BadRequestError("Session ID is required", field="session_id")

        session = await self.stripe_gateway.retrieve_checkout_session(session_id)
        logger.info(f"Session payment status: {session.payment_status}, amount: {session.amount_total}")

        owner = session.metadata.get("user_id")
        if owner and owner != user.user_id:
            raise AuthorizationError(
                "Checkout session belongs to another user",
                resource_type="checkout_session",
                resource_id=session_id,
                user_id=user.user_id,
            )

        if not session.is_paid:
            return PaymentVerification(success=False, verified=False)

        existing = await self.subscription_repository.get_by_user_id(user.user_id)
        if existing is None or not existing.grants_access():
            subscription = await self.subscription_repository.upsert(
                user.user_id,
                paid_subscription_data(
                    session.customer_id, session.id, session.amount_total, session.currency
                ),
            )
            logger.info(f"Subscription created/updated for user {user.user_id}")
        else:
            subscription = existing
            logger.info(f"Subscription already active and unexpired for user {user.user_id}")

        return PaymentVerification(success=True, verified=True, subscription=subscription)

    async def validate_discount(self, discount_code: str, amount: float) -> Optional[DiscountQuote]:
        """
        Price a promotion code against an amount.

        Returns:
            DiscountQuote, or None when no active promotion code matches
        """
        promotion = await self.stripe_gateway.find_promotion_code(discount_code.strip())
        if promotion is None:
            logger.info(f"Invalid discount code: {discount_code.strip()}")
            return None

        return apply_coupon(amount, promotion.coupon, self.settings.DEFAULT_CURRENCY)

    async def get_subscription(self, user_id: str) -> Optional[Subscription]:
        return await self.subscription_repository.get_by_user_id(user_id)
