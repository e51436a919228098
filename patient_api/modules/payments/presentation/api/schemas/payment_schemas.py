# 📄 File: patient_api/modules/payments/presentation/api/schemas/payment_schemas.py
# 🧭 Purpose (Layman Explanation):
# Defines the shape of what the website sends when paying, checking a discount code or
# registering, and of the answers it gets back.
# 🧪 Purpose (Technical Summary):
# Pydantic request/response schemas for the payments endpoints. The web client speaks
# camelCase, so fields carry camelCase aliases and also accept their snake_case names.
# 🔗 Dependencies:
# pydantic (alias generators), subscription domain model
# 🔄 Connected Modules / Calls From:
# patient_api.modules.payments.presentation.api.v1.payments

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from patient_api.modules.payments.domain.models.subscription import Subscription


class CamelModel(BaseModel):
    """Base schema with camelCase wire names"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class CreatePaymentRequest(CamelModel):
    amount: float = Field(..., ge=0, description="Amount to charge in major units, discounts applied")
    email: Optional[EmailStr] = Field(None, description="Email used for the checkout customer")
    discount_code: Optional[str] = Field(None, description="Discount code entered by the patient")


class VerifyPaymentRequest(CamelModel):
    session_id: Optional[str] = Field(None, description="Stripe Checkout session id")


class ValidateDiscountRequest(CamelModel):
    discount_code: Optional[str] = None
    amount: float = Field(..., ge=0)


class RegisterWithDiscountRequest(CamelModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    discount_code: Optional[str] = None


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class CreatePaymentResponse(CamelModel):
    url: str
    free_access: bool = False
    session_id: Optional[str] = None


class VerifyPaymentResponse(CamelModel):
    success: bool
    verified: bool


class ValidateDiscountResponse(CamelModel):
    valid: bool
    error: Optional[str] = None
    discount_amount: Optional[float] = None
    final_amount: Optional[float] = None
    discount_type: Optional[str] = None
    discount_value: Optional[float] = None
    currency: Optional[str] = None


class RegisterWithDiscountResponse(CamelModel):
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


class WebhookResponse(CamelModel):
    received: bool = True
    processed: bool = True
    reason: Optional[str] = None


class SubscriptionResponse(CamelModel):
    """The caller's subscription record, if any, and whether it grants access"""

    subscription_type: Optional[str] = None
    status: Optional[str] = None
    expires_at: Optional[datetime] = None
    amount_paid: Optional[float] = None
    currency: Optional[str] = None
    welcome_email_sent: bool = False
    has_access: bool = False

    @classmethod
    def from_domain(cls, subscription: Optional[Subscription]) -> "SubscriptionResponse":
        if subscription is None:
            return cls()
        return cls(
            subscription_type=subscription.subscription_type.value,
            status=subscription.status.value,
            expires_at=subscription.expires_at,
            amount_paid=subscription.amount_paid,
            currency=subscription.currency,
            welcome_email_sent=subscription.welcome_email_sent,
            has_access=subscription.grants_access(),
        )
