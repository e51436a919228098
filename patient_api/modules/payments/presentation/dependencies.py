# 📄 File: patient_api/modules/payments/presentation/dependencies.py
# 🧭 Purpose (Layman Explanation):
# The gatekeeper for paid content: it lets a patient through only when their access is active.
# 🧪 Purpose (Technical Summary):
# FastAPI dependency resolving the bearer user and requiring a subscription that grants access
# (active and unexpired); otherwise SubscriptionError (402).
# 🔗 Dependencies:
# FastAPI, patient_api.shared.core.dependencies, SubscriptionRepository
# 🔄 Connected Modules / Calls From:
# patient_api.modules.consultation.presentation.api.v1.consultation

import logging

from fastapi import Depends

from patient_api.modules.payments.domain.repositories.subscription_repository import SubscriptionRepository
from patient_api.shared.core.dependencies import CurrentUser, get_current_user
from patient_api.shared.core.exceptions import SubscriptionError

logger = logging.getLogger(__name__)


async def require_active_subscription(
    current_user: CurrentUser = Depends(get_current_user),
    subscription_repository: SubscriptionRepository = Depends(),
) -> CurrentUser:
    """
    Require the current user to hold a subscription that grants access.

    Returns:
        CurrentUser: The authenticated user

    Raises:
        AuthenticationError: If the request is not authenticated
        SubscriptionError: If there is no active, unexpired subscription
    """
    subscription = await subscription_repository.get_by_user_id(current_user.user_id)

    if subscription is None:
        logger.info(f"No subscription for user {current_user.user_id}")
        raise SubscriptionError(feature="consultation")

    if not subscription.grants_access():
        logger.info(f"Subscription of user {current_user.user_id} does not grant access ({subscription.status.value})")
        raise SubscriptionError(
            feature="consultation",
            subscription_status="expired" if subscription.is_expired() else subscription.status.value,
        )

    return current_user
