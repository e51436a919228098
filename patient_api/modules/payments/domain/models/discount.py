# 📄 File: patient_api/modules/payments/domain/models/discount.py
# 🧭 Purpose (Layman Explanation):
# Describes a discount code and what it takes off: a percentage or a fixed amount.
# 🧪 Purpose (Technical Summary):
# Value objects for promotion codes and their coupons, decoupled from stripe SDK objects.
# 🔗 Dependencies:
# dataclasses
# 🔄 Connected Modules / Calls From:
# Stripe gateway (construction), discount service (arithmetic)

from dataclasses import dataclass
from typing import Optional


@dataclass
class CouponInfo:
    """The discount carried by a promotion code."""

    percent_off: Optional[float] = None
    amount_off: Optional[int] = None  # Minor units
    currency: Optional[str] = None


@dataclass
class PromotionCodeInfo:
    id: str
    code: str
    coupon: CouponInfo
