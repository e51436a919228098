# 📄 File: patient_api/modules/payments/domain/services/discount_service.py
# 🧭 Purpose (Layman Explanation):
# Works out how much a discount code takes off the price and what the patient has left to pay.
# 🧪 Purpose (Technical Summary):
# Pure discount arithmetic on Decimal, rounded half-up to pence, plus the minimum charge rule
# that decides between free access and checkout.
# 🔗 Dependencies:
# decimal, pydantic, stripe gateway coupon info
# 🔄 Connected Modules / Calls From:
# Payment service (validate-discount, create-payment), registration service

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

from patient_api.modules.payments.domain.models.discount import CouponInfo

PENNY = Decimal("0.01")

Number = Union[int, float, Decimal]


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountQuote(BaseModel):
    """Price after applying a coupon; amounts in major units"""

    discount_amount: float
    final_amount: float
    discount_type: DiscountType
    discount_value: float
    currency: Optional[str] = None


def to_money(value: Number) -> Decimal:
    return Decimal(str(value)).quantize(PENNY, rounding=ROUND_HALF_UP)


def to_minor_units(value: Number) -> int:
    """Major units to the integer minor units Stripe expects."""
    return int((to_money(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_minor_units(value: Optional[int]) -> float:
    return float(Decimal(value or 0) / 100)


def apply_coupon(amount: Number, coupon: CouponInfo, default_currency: str) -> DiscountQuote:
    """
    Apply a coupon to an amount.

    Percentage coupons take ``amount * percent / 100`` rounded to pence; fixed coupons take
    ``amount_off`` converted from minor units. The final amount never goes below zero.
    """
    base = to_money(amount)

    if coupon.percent_off:
        discount_type = DiscountType.PERCENTAGE
        discount_value = Decimal(str(coupon.percent_off))
        discount = to_money(base * discount_value / 100)
    elif coupon.amount_off:
        discount_type = DiscountType.FIXED
        discount = to_money(Decimal(coupon.amount_off) / 100)
        discount_value = discount
    else:
        discount_type = DiscountType.FIXED
        discount = Decimal("0.00")
        discount_value = discount

    final = max(Decimal("0.00"), base - discount)

    return DiscountQuote(
        discount_amount=float(discount),
        final_amount=float(final),
        discount_type=discount_type,
        discount_value=float(discount_value),
        currency=(coupon.currency or default_currency).lower(),
    )


def is_below_minimum_charge(amount: Number, minimum: Number) -> bool:
    """Amounts of zero or below the processor minimum are granted for free."""
    value = to_money(amount)
    return value <= 0 or value < to_money(minimum)
