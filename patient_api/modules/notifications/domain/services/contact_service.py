# 📄 File: patient_api/modules/notifications/domain/services/contact_service.py
# 🧭 Purpose (Layman Explanation):
# Forwards a message from the website's contact form to the support inbox.
# 🧪 Purpose (Technical Summary):
# Renders the contact notification and sends it to SUPPORT_EMAIL with the visitor as reply-to.
# 🔗 Dependencies:
# ResendMailer, Jinja2 templates, settings
# 🔄 Connected Modules / Calls From:
# patient_api.modules.notifications.presentation.api.v1.notifications

import logging

from fastapi import Depends

from patient_api.modules.notifications.infrastructure.external.resend_mailer import (
    EmailMessage,
    ResendMailer,
    get_mailer,
)
from patient_api.shared.config.settings import get_settings
from patient_api.shared.utils.templates import render_template

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, mailer: ResendMailer = Depends(get_mailer)):
        self.mailer = mailer
        self.settings = get_settings()

    async def send_contact_email(self, email: str, title: str, content: str) -> str:
        """
        Send a contact form submission to the support inbox.

        Returns:
            str: Resend message id
        """
        logger.info(f"Processing contact form for: {email}")

        message = EmailMessage(
            sender=self.settings.CONTACT_EMAIL_FROM,
            to=[self.settings.SUPPORT_EMAIL],
            reply_to=email,
            subject=f"Contact Form: {title}",
            html=render_template("contact_email.html", {
                "email": email,
                "title": title,
                "content": content,
            }),
        )
        return await self.mailer.send(message)
