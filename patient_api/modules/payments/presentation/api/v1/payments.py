# 📄 File: patient_api/modules/payments/presentation/api/v1/payments.py
# 🧭 Purpose (Layman Explanation):
# The web endpoints for paying: starting a checkout, confirming it, checking discount codes,
# registering with a code, and receiving Stripe's payment notifications.
#
# 🧪 Purpose (Technical Summary):
# FastAPI payment endpoints over PaymentService, RegistrationService and WebhookService.
# Registration is rate limited; the webhook reads the raw body for signature verification.
#
# 🔗 Dependencies:
# - FastAPI router, slowapi limiter
# - payments domain services and schemas
# - patient_api.shared.core.dependencies (bearer authentication)
#
# 🔄 Connected Modules / Calls From:
# - patient_api.api.v1.router (mounted at /payments)
# - Web client payment and registration pages, Stripe webhooks

"""
Payment API Endpoints

Endpoints:
- POST /create-payment: Free access or a Stripe Checkout session
- POST /verify-payment: Confirm a Checkout session and activate access
- POST /validate-discount: Price a discount code
- POST /register-with-discount: Create an account, optionally with a discount code
- POST /webhook: Stripe webhook receiver
- GET /subscriptions/me: The caller's subscription
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse

from patient_api.modules.payments.domain.services.payment_service import PaymentService
from patient_api.modules.payments.domain.services.registration_service import RegistrationService
from patient_api.modules.payments.domain.services.webhook_service import WebhookService
from patient_api.modules.payments.presentation.api.schemas.payment_schemas import (
    CreatePaymentRequest,
    CreatePaymentResponse,
    RegisterWithDiscountRequest,
    RegisterWithDiscountResponse,
    SubscriptionResponse,
    ValidateDiscountRequest,
    ValidateDiscountResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
    WebhookResponse,
)
from patient_api.shared.core.dependencies import CurrentUser, get_current_user
from patient_api.shared.core.rate_limiter import limiter, registration_limit

logger = logging.getLogger(__name__)

payments_router = APIRouter()


@payments_router.post(
    "/create-payment",
    response_model=CreatePaymentResponse,
    summary="Create payment",
    description="Grant free access for amounts below the minimum charge, otherwise open a Stripe Checkout session",
    responses={
        401: {"description": "Not authenticated"},
        502: {"description": "Stripe request failed"},
    }
)
async def create_payment(
    payload: CreatePaymentRequest,
    origin: Optional[str] = Header(None),
    current_user: CurrentUser = Depends(get_current_user),
    payment_service: PaymentService = Depends(),
) -> CreatePaymentResponse:
    redirect = await payment_service.create_payment(
        user=current_user,
        amount=payload.amount,
        origin=origin,
        email=payload.email,
        discount_code=payload.discount_code,
    )
    return CreatePaymentResponse(
        url=redirect.url,
        free_access=redirect.free_access,
        session_id=redirect.session_id,
    )


@payments_router.post(
    "/verify-payment",
    response_model=VerifyPaymentResponse,
    summary="Verify payment",
    description="Check a Checkout session and activate the subscription once it is paid",
    responses={
        400: {"description": "Session id missing"},
        401: {"description": "Not authenticated"},
        403: {"description": "Session belongs to another user"},
    }
)
async def verify_payment(
    payload: VerifyPaymentRequest,
    current_user: CurrentUser = Depends(get_current_user),
    payment_service: PaymentService = Depends(),
) -> VerifyPaymentResponse:
    verification = await payment_service.verify_payment(current_user, payload.session_id)
    return VerifyPaymentResponse(success=verification.success, verified=verification.verified)


@payments_router.post(
    "/validate-discount",
    response_model=ValidateDiscountResponse,
    response_model_exclude_none=True,
    summary="Validate discount code",
    description="Price a promotion code against an amount",
    responses={400: {"description": "Discount code missing"}}
)
async def validate_discount(
    payload: ValidateDiscountRequest,
    payment_service: PaymentService = Depends(),
):
    if not payload.discount_code or not payload.discount_code.strip():
        body = ValidateDiscountResponse(valid=False, error="Discount code is required")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=body.model_dump(by_alias=True, exclude_none=True),
        )

    quote = await payment_service.validate_discount(payload.discount_code, payload.amount)
    if quote is None:
        return ValidateDiscountResponse(valid=False, error="Invalid or expired discount code")

    return ValidateDiscountResponse(
        valid=True,
        discount_amount=quote.discount_amount,
        final_amount=quote.final_amount,
        discount_type=quote.discount_type.value,
        discount_value=quote.discount_value,
        currency=quote.currency,
    )


@payments_router.post(
    "/register-with-discount",
    response_model=RegisterWithDiscountResponse,
    response_model_exclude_none=True,
    summary="Register with discount",
    description="Create an account and route it to free access, checkout or the payment page",
    responses={
        400: {"description": "Missing fields"},
        409: {"description": "Account already exists"},
        429: {"description": "Too many registration attempts"},
    }
)
@limiter.limit(registration_limit)
async def register_with_discount(
    request: Request,
    payload: RegisterWithDiscountRequest,
    registration_service: RegistrationService = Depends(),
) -> RegisterWithDiscountResponse:
    result = await registration_service.register(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        discount_code=payload.discount_code,
    )
    return RegisterWithDiscountResponse(**result.model_dump())


@payments_router.post(
    "/webhook",
    response_model=WebhookResponse,
    response_model_exclude_none=True,
    summary="Stripe webhook",
    description="Receive Stripe events; each event id is processed at most once",
    responses={400: {"description": "Missing or invalid signature"}}
)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    webhook_service: WebhookService = Depends(),
) -> WebhookResponse:
    payload = await request.body()
    result = await webhook_service.handle(payload, stripe_signature)
    return WebhookResponse(**result.model_dump())


@payments_router.get(
    "/subscriptions/me",
    response_model=SubscriptionResponse,
    summary="Current subscription",
    description="The caller's subscription and whether it currently grants access",
)
async def get_my_subscription(
    current_user: CurrentUser = Depends(get_current_user),
    payment_service: PaymentService = Depends(),
) -> SubscriptionResponse:
    subscription = await payment_service.get_subscription(current_user.user_id)
    return SubscriptionResponse.from_domain(subscription)
