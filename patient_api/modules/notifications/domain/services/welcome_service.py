# 📄 File: patient_api/modules/notifications/domain/services/welcome_service.py
# 🧭 Purpose (Layman Explanation):
# Sends each new patient one welcome email, and never a second one, even if several parts of
# the system ask for it.
# 🧪 Purpose (Technical Summary):
# Idempotent welcome email: the subscription's welcome_email_sent flag is checked before sending
# and set afterwards. A stable X-Idempotency-Key header is attached per user. The link points
# at the site of the patient's market.
# 🔗 Dependencies:
# SubscriptionRepository, ResendMailer, market service, Jinja2 templates
# 🔄 Connected Modules / Calls From:
# Notifications API (send-welcome-email), webhook service

import logging
from typing import Optional

from fastapi import Depends
from pydantic import BaseModel

from patient_api.modules.markets.domain.services.market_service import get_market_config, parse_market_code
from patient_api.modules.notifications.infrastructure.external.resend_mailer import (
    EmailMessage,
    ResendMailer,
    get_mailer,
)
from patient_api.modules.payments.domain.repositories.subscription_repository import SubscriptionRepository
from patient_api.shared.config.settings import get_settings
from patient_api.shared.core.exceptions import BadRequestError, DatabaseError, NotFoundError
from patient_api.shared.utils.templates import render_template

logger = logging.getLogger(__name__)


class WelcomeEmailResult(BaseModel):
    success: bool = True
    skipped: bool = False
    message: Optional[str] = None
    message_id: Optional[str] = None
    idempotency_key: Optional[str] = None


def welcome_idempotency_key(user_id: str) -> str:
    return f"welcome_{user_id}"


class WelcomeEmailService:
    """Sends the welcome email at most once per user."""

    def __init__(
        self,
        subscription_repository: SubscriptionRepository = Depends(),
        mailer: ResendMailer = Depends(get_mailer),
    ):
        self.subscription_repository = subscription_repository
        self.mailer = mailer
        self.settings = get_settings()

    async def send_welcome_email(
        self,
        user_id: str,
        email: Optional[str],
        first_name: Optional[str] = None,
        is_paid: bool = False,
        market_code: Optional[str] = None,
    ) -> WelcomeEmailResult:
        """
        Send the welcome email unless it was already sent.

        Raises:
            BadRequestError: If the user has no email address
            NotFoundError: If the user has no subscription record
        """
        if not user_id or not email:
            raise BadRequestError("user_id and email are required")

        subscription = await self.subscription_repository.get_by_user_id(user_id)
        if subscription is None:
            raise NotFoundError(
                "Subscription not found",
                resource_type="subscription",
                resource_id=user_id,
            )

        if subscription.welcome_email_sent:
            logger.info(f"Welcome email already sent to user {user_id}, skipping")
            return WelcomeEmailResult(skipped=True, message="Email already sent")

        market = get_market_config(parse_market_code(market_code))
        idempotency_key = welcome_idempotency_key(user_id)
        context = {
            "first_name": first_name,
            "is_paid": is_paid,
            "site_url": market.site_url,
            "support_email": self.settings.SUPPORT_EMAIL,
            "logo_url": self.settings.EMAIL_LOGO_URL,
        }

        message_id = await self.mailer.send(EmailMessage(
            sender=self.settings.EMAIL_FROM,
            to=[email],
            subject=self.settings.WELCOME_EMAIL_SUBJECT,
            html=render_template("welcome_email.html", context),
            text=render_template("welcome_email.txt", context),
            headers={"X-Idempotency-Key": idempotency_key},
        ))

        try:
            await self.subscription_repository.mark_welcome_email_sent(user_id)
        except DatabaseError as e:
            # Email already delivered
            logger.critical(f"Welcome email {message_id} sent but flag update failed for user {user_id}: {e.message}")

        logger.info(f"Welcome email {message_id} sent to user {user_id} ({market.code.value})")
        return WelcomeEmailResult(
            message_id=message_id,
            idempotency_key=idempotency_key,
            message="Welcome email sent",
        )
