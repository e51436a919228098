# 📄 File: patient_api/modules/payments/domain/services/registration_service.py
# 🧭 Purpose (Layman Explanation):
# Signs up a new patient. If they have a discount code it is checked first; a code that makes
# the consultation free gives immediate access, otherwise the patient is sent on to pay.
# 🧪 Purpose (Technical Summary):
# Orchestrates register-with-discount: promotion code pricing, Supabase account creation,
# subscription insert (free/active or pending/pending) and Checkout session creation with a
# fallback to the in-app payment page. There are no compensating actions: a created account
# whose subscription insert fails is logged and kept.
# 🔗 Dependencies:
# FastAPI Depends, SupabaseAuthGateway, StripeGateway, SubscriptionRepository, discount service
# 🔄 Connected Modules / Calls From:
# patient_api.modules.payments.presentation.api.v1.payments

import logging
from typing import Optional

from fastapi import Depends
from pydantic import BaseModel

from patient_api.modules.payments.domain.models.discount import PromotionCodeInfo
from patient_api.modules.payments.domain.models.subscription import SubscriptionStatus, SubscriptionType
from patient_api.modules.payments.domain.repositories.subscription_repository import SubscriptionRepository
from patient_api.modules.payments.domain.services.discount_service import apply_coupon, to_minor_units
from patient_api.modules.payments.infrastructure.external.stripe_gateway import (
    StripeGateway,
    get_stripe_gateway,
)
from patient_api.shared.config.settings import get_settings
from patient_api.shared.core.exceptions import (
    BadRequestError,
    ConfigurationError,
    ConflictError,
    DatabaseError,
    ExternalServiceError,
)
from patient_api.shared.infrastructure.external.supabase_auth import (
    SupabaseAuthGateway,
    get_supabase_auth_gateway,
)

logger = logging.getLogger(__name__)


class RegistrationResult(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    user_id: Optional[str] = None
    redirect_to: Optional[str] = None
    free_access: bool = False
    stripe_redirect: bool = False
    user_exists: bool = False
    discount_applied: bool = False
    original_amount: Optional[float] = None
    discount_amount: Optional[float] = None
    final_amount: Optional[float] = None


def _format_amount(value: float) -> str:
    return f"{value:.2f}"


class RegistrationService:
    """
    Domain service for account registration with an optional discount code.
    """

    def __init__(
        self,
        subscription_repository: SubscriptionRepository = Depends(),
        auth_gateway: SupabaseAuthGateway = Depends(get_supabase_auth_gateway),
        stripe_gateway: StripeGateway = Depends(get_stripe_gateway),
    ):
        self.subscription_repository = subscription_repository
        self.auth_gateway = auth_gateway
        self.stripe_gateway = stripe_gateway
        self.settings = get_settings()

    async def register(
        self,
        email: Optional[str],
        password: Optional[str],
        first_name: Optional[str],
        last_name: Optional[str],
        discount_code: Optional[str] = None,
    ) -> RegistrationResult:
        """
        Register a patient and route them to free access or checkout.

        Returns:
            RegistrationResult: ``success=False`` when the discount code matches no promotion

        Raises:
            BadRequestError: If a required field is missing
            ConflictError: If the email is taken and the code does not grant free access
        """
        if not email or not password or not first_name or not last_name:
            raise BadRequestError(
                "Missing required fields: email, password, firstName, and lastName are required"
            )

        base_price = self.settings.REGISTRATION_BASE_PRICE
        currency = self.settings.DEFAULT_CURRENCY
        code = (discount_code or "").strip()

        promotion: Optional[PromotionCodeInfo] = None
        discount_amount = 0.0
        final_amount = base_price

        if code:
            logger.info(f"Validating discount code {code} for {email}")
            try:
                promotion = await self.stripe_gateway.find_promotion_code(code)
            except (ExternalServiceError, ConfigurationError) as e:
                # Registration continues at full price when the lookup itself fails
                logger.warning(f"Stripe discount validation error: {e.message}")
            else:
                if promotion is None:
                    logger.info(f"Invalid discount code {code}")
                    return RegistrationResult(
                        success=False,
                        error=f'Invalid discount code "{code}". Please check the code and try again.',
                    )
                quote = apply_coupon(base_price, promotion.coupon, currency)
                discount_amount = quote.discount_amount
                final_amount = quote.final_amount
                logger.info(f"Valid discount code applied: -{discount_amount}, final {final_amount}")

        is_valid_discount = promotion is not None
        is_free = final_amount == 0

        try:
            user = await self.auth_gateway.create_user(email, password, first_name, last_name)
        except ConflictError:
            if is_valid_discount and is_free:
                result = await self._grant_existing_user_free_access(email, currency)
                if result is not None:
                    return result
            raise

        subscription_data = {
            "subscription_type": SubscriptionType.FREE if is_free else SubscriptionType.PENDING,
            "status": SubscriptionStatus.ACTIVE if is_free else SubscriptionStatus.PENDING,
            "amount_paid": final_amount,
            "currency": currency,
            "expires_at": None,
            "welcome_email_sent": False,
        }
        try:
            await self.subscription_repository.create(user.id, subscription_data)
            logger.info(f"Subscription created for user {user.id}")
        except (DatabaseError, ConflictError) as e:
            logger.error(f"Subscription creation error for user {user.id}: {e.message}")

        if is_free and is_valid_discount:
            return RegistrationResult(
                success=True,
                message="Account created successfully! Your discount code gave you free access.",
                user_id=user.id,
                redirect_to="/welcome",
                free_access=True,
                discount_applied=True,
                original_amount=base_price,
                discount_amount=discount_amount,
            )

        discount_note = (
            f"Discount applied - reduced from £{_format_amount(base_price)} to £{_format_amount(final_amount)}. "
            if is_valid_discount else ""
        )

        try:
            checkout_url = await self._create_registration_checkout(
                user.id, email, f"{first_name} {last_name}", code, promotion
            )
        except (ExternalServiceError, ConfigurationError) as e:
            logger.warning(f"Stripe checkout creation failed for user {user.id}: {e.message}")
            return RegistrationResult(
                success=True,
                message=f"Account created successfully! {discount_note}Complete payment to get started.",
                user_id=user.id,
                redirect_to="/payment",
                final_amount=final_amount,
                discount_applied=is_valid_discount,
                original_amount=base_price,
                discount_amount=discount_amount,
            )

        return RegistrationResult(
            success=True,
            message=f"Account created successfully! {discount_note}Redirecting to payment...",
            user_id=user.id,
            redirect_to=checkout_url,
            stripe_redirect=True,
            final_amount=final_amount,
            discount_applied=is_valid_discount,
            original_amount=base_price,
            discount_amount=discount_amount,
        )

    async def _grant_existing_user_free_access(self, email: str, currency: str) -> Optional[RegistrationResult]:
        existing_user = await self.auth_gateway.find_user_by_email(email)
        if existing_user is None:
            return None

        try:
            await self.subscription_repository.upsert(existing_user.id, {
                "subscription_type": SubscriptionType.FREE,
                "status": SubscriptionStatus.ACTIVE,
                "amount_paid": 0,
                "currency": currency,
                "expires_at": None,
                "welcome_email_sent": False,
            })
        except DatabaseError as e:
            logger.error(f"Failed to grant free access to existing user {existing_user.id}: {e.message}")
            return None

        logger.info(f"Existing user {existing_user.id} updated with free access")
        return RegistrationResult(
            success=True,
            message=(
                "Account updated with free access! Check your email for a welcome message. "
                "Please sign in to continue."
            ),
            user_id=existing_user.id,
            user_exists=True,
            free_access=True,
        )

    async def _create_registration_checkout(
        self,
        user_id: str,
        email: str,
        name: str,
        code: str,
        promotion: Optional[PromotionCodeInfo],
    ) -> str:
        customer_id = await self.stripe_gateway.find_customer_id(email)
        if not customer_id:
            customer_id = await self.stripe_gateway.create_customer(
                email=email,
                name=name,
                metadata={"user_id": user_id},
            )

        if self.settings.STRIPE_PRICE_ID:
            line_item = {"price": self.settings.STRIPE_PRICE_ID, "quantity": 1}
        else:
            line_item = {
                "price_data": {
                    "currency": self.settings.DEFAULT_CURRENCY,
                    "product_data": {
                        "name": self.settings.PRODUCT_NAME,
                        "description": self.settings.PRODUCT_DESCRIPTION,
                    },
                    "unit_amount": to_minor_units(self.settings.REGISTRATION_BASE_PRICE),
                },
                "quantity": 1,
            }

        site_url = self.settings.site_url
        params = {
            "customer": customer_id,
            "line_items": [line_item],
            "mode": "payment",
            "success_url": f"{site_url}/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{site_url}/auth",
            "locale": "en",
            "payment_method_types": ["card"],
            "metadata": {
                "user_id": user_id,
                "discount_code_applied": code or "none",
            },
        }
        if promotion is not None:
            params["discounts"] = [{"promotion_code": promotion.id}]

        session = await self.stripe_gateway.create_checkout_session(params)
        return session.url
