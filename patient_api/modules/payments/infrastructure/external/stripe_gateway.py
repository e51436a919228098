# 📄 File: patient_api/modules/payments/infrastructure/external/stripe_gateway.py
# 🧭 Purpose (Layman Explanation):
# Talks to Stripe, the card payment company: it opens checkout pages, looks up discount codes
# and customers, and checks that payment notifications really came from Stripe.
# 🧪 Purpose (Technical Summary):
# Async facade over the synchronous stripe SDK. Every call passes the API key and pinned API
# version explicitly and runs in Starlette's thread pool with the configured timeout and retries.
# SDK objects are reduced to small dataclasses so services never depend on StripeObject shapes.
# 🔗 Dependencies:
# stripe, starlette.concurrency, patient_api.shared.config.settings
# 🔄 Connected Modules / Calls From:
# Payment service, registration service, webhook service

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import stripe
from starlette.concurrency import run_in_threadpool

from patient_api.modules.payments.domain.models.discount import CouponInfo, PromotionCodeInfo
from patient_api.shared.config.settings import Settings, get_settings
from patient_api.shared.core.exceptions import (
    BadRequestError,
    ConfigurationError,
    ExternalServiceError,
)

logger = logging.getLogger(__name__)


@dataclass
class CheckoutSessionInfo:
    id: str
    url: Optional[str] = None
    payment_status: Optional[str] = None
    customer_id: Optional[str] = None
    amount_total: Optional[int] = None  # Minor units
    currency: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


@dataclass
class CustomerInfo:
    id: str
    email: Optional[str] = None
    deleted: bool = False


@dataclass
class WebhookEvent:
    id: str
    type: str
    data_object: Dict[str, Any]


def _field(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from a StripeObject or plain dict."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    try:
        return obj[name]
    except (KeyError, TypeError):
        return getattr(obj, name, default)


def _customer_id(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return _field(value, "id")


def checkout_session_from_stripe(session: Any) -> CheckoutSessionInfo:
    return CheckoutSessionInfo(
        id=_field(session, "id"),
        url=_field(session, "url"),
        payment_status=_field(session, "payment_status"),
        customer_id=_customer_id(_field(session, "customer")),
        amount_total=_field(session, "amount_total"),
        currency=_field(session, "currency"),
        metadata=dict(_field(session, "metadata") or {}),
    )


class StripeGateway:
    """
    Stripe operations used by the payment flow.

    Raises ConfigurationError when no secret key is configured and wraps SDK failures in
    ExternalServiceError.
    """

    def __init__(self, api_key: Optional[str] = None, api_version: Optional[str] = None):
        settings = get_settings()
        self.api_key = api_key or settings.STRIPE_SECRET_KEY
        self.api_version = api_version or settings.STRIPE_API_VERSION
        self.webhook_secret = settings.STRIPE_WEBHOOK_SECRET

    def _request_options(self) -> Dict[str, Any]:
        if not self.api_key:
            raise ConfigurationError("Stripe is not configured", setting="STRIPE_SECRET_KEY")
        return {"api_key": self.api_key, "stripe_version": self.api_version}

    async def _call(self, operation: str, func, *args, **kwargs):
        options = self._request_options()
        try:
            return await run_in_threadpool(func, *args, **kwargs, **options)
        except stripe.StripeError as e:
            logger.error(f"Stripe {operation} failed: {e}")
            raise ExternalServiceError(
                f"Stripe {operation} failed",
                service="stripe",
                service_response=getattr(e, "user_message", None) or str(e),
            )

    async def find_promotion_code(self, code: str) -> Optional[PromotionCodeInfo]:
        """Look up an active promotion code by its customer-facing code."""
        result = await self._call(
            "promotion code lookup",
            stripe.PromotionCode.list,
            code=code,
            active=True,
            limit=1,
        )
        data: List[Any] = list(_field(result, "data") or [])
        if not data:
            return None

        promotion = data[0]
        coupon = _field(promotion, "coupon")
        return PromotionCodeInfo(
            id=_field(promotion, "id"),
            code=_field(promotion, "code", code),
            coupon=CouponInfo(
                percent_off=_field(coupon, "percent_off"),
                amount_off=_field(coupon, "amount_off"),
                currency=_field(coupon, "currency"),
            ),
        )

    async def find_customer_id(self, email: str) -> Optional[str]:
        result = await self._call("customer lookup", stripe.Customer.list, email=email, limit=1)
        data = list(_field(result, "data") or [])
        return _field(data[0], "id") if data else None

    async def create_customer(self, email: str, name: str, metadata: Dict[str, str]) -> str:
        customer = await self._call(
            "customer creation",
            stripe.Customer.create,
            email=email,
            name=name,
            metadata=metadata,
        )
        return _field(customer, "id")

    async def retrieve_customer(self, customer_id: str) -> CustomerInfo:
        customer = await self._call("customer retrieval", stripe.Customer.retrieve, customer_id)
        return CustomerInfo(
            id=_field(customer, "id", customer_id),
            email=_field(customer, "email"),
            deleted=bool(_field(customer, "deleted", False)),
        )

    async def create_checkout_session(self, params: Dict[str, Any]) -> CheckoutSessionInfo:
        """Create a Checkout session from prepared parameters."""
        session = await self._call("checkout session creation", stripe.checkout.Session.create, **params)
        info = checkout_session_from_stripe(session)
        logger.info(f"Created Stripe checkout session {info.id}")
        return info

    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionInfo:
        session = await self._call(
            "checkout session retrieval",
            stripe.checkout.Session.retrieve,
            session_id,
        )
        return checkout_session_from_stripe(session)

    def construct_webhook_event(self, payload: bytes, signature: Optional[str]) -> WebhookEvent:
        """
        Verify a webhook payload against its Stripe-Signature header.

        Raises:
            ConfigurationError: If the webhook secret is not configured
            BadRequestError: If the signature is missing or invalid
        """
        if not self.webhook_secret:
            raise ConfigurationError("Stripe webhook secret is not configured", setting="STRIPE_WEBHOOK_SECRET")
        if not signature:
            raise BadRequestError("Missing stripe-signature header", field="stripe-signature")

        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise BadRequestError(f"Webhook signature verification failed: {e}", field="stripe-signature")
        except ValueError as e:
            raise BadRequestError(f"Invalid webhook payload: {e}")

        data = _field(event, "data") or {}
        return WebhookEvent(
            id=_field(event, "id"),
            type=_field(event, "type"),
            data_object=_field(data, "object") or {},
        )


def configure_stripe_client(settings: Settings) -> None:
    """Apply the request timeout and network retry count to the SDK's shared HTTP client."""
    stripe.max_network_retries = settings.STRIPE_MAX_NETWORK_RETRIES
    stripe.default_http_client = stripe.RequestsClient(timeout=settings.STRIPE_TIMEOUT_SECONDS)
    logger.info(
        f"Stripe client configured: timeout={settings.STRIPE_TIMEOUT_SECONDS}s "
        f"retries={settings.STRIPE_MAX_NETWORK_RETRIES}"
    )


def get_stripe_gateway() -> StripeGateway:
    """FastAPI dependency returning the Stripe gateway."""
    return StripeGateway()
