# 📄 File: patient_api/modules/notifications/infrastructure/external/resend_mailer.py
# 🧭 Purpose (Layman Explanation):
# Sends emails through Resend: support messages, welcome emails and consultation documents,
# optionally with a PDF attached.
# 🧪 Purpose (Technical Summary):
# Async wrapper over the synchronous resend SDK. Messages are plain dataclasses converted to
# Resend send parameters; SDK failures and responses without an id become ExternalServiceError.
# 🔗 Dependencies:
# resend, starlette.concurrency, patient_api.shared.config.settings
# 🔄 Connected Modules / Calls From:
# Contact, document and welcome email services

import base64
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import resend
from resend.exceptions import ResendError
from starlette.concurrency import run_in_threadpool

from patient_api.shared.config.settings import get_settings
from patient_api.shared.core.exceptions import ConfigurationError, ExternalServiceError

logger = logging.getLogger(__name__)


@dataclass
class EmailAttachment:
    filename: str
    content: bytes
    content_type: str = "application/pdf"


@dataclass
class EmailMessage:
    """An outgoing email"""

    sender: str
    to: List[str]
    subject: str
    html: str
    text: Optional[str] = None
    reply_to: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    attachments: List[EmailAttachment] = field(default_factory=list)

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "from": self.sender,
            "to": self.to,
            "subject": self.subject,
            "html": self.html,
        }
        if self.text:
            params["text"] = self.text
        if self.reply_to:
            params["reply_to"] = self.reply_to
        if self.headers:
            params["headers"] = self.headers
        if self.attachments:
            params["attachments"] = [
                {
                    "filename": attachment.filename,
                    "content": base64.b64encode(attachment.content).decode("ascii"),
                    "content_type": attachment.content_type,
                }
                for attachment in self.attachments
            ]
        return params


class ResendMailer:
    """Email delivery through the Resend API."""

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or get_settings().RESEND_API_KEY

    def _send(self, params: Dict[str, Any]) -> Any:
        resend.api_key = self.api_key
        return resend.Emails.send(params)

    async def send(self, message: EmailMessage) -> str:
        """
        Send an email.

        Returns:
            str: Resend message id

        Raises:
            ConfigurationError: If no API key is configured
            ExternalServiceError: If Resend rejects the message
        """
        if not self.api_key:
            raise ConfigurationError("Email service is not configured", setting="RESEND_API_KEY")

        logger.info(f"Sending email '{message.subject}' to {', '.join(message.to)}")
        try:
            response = await run_in_threadpool(self._send, message.to_params())
        except ResendError as e:
            logger.error(f"Resend failed to send email to {message.to}: {e}")
            raise ExternalServiceError(
                "Failed to send email via Resend",
                service="resend",
                service_response=str(e),
            )

        message_id = response.get("id") if isinstance(response, dict) else getattr(response, "id", None)
        if not message_id:
            logger.error(f"No email ID returned from Resend: {response}")
            raise ExternalServiceError("Resend API did not return an email ID", service="resend")

        logger.info(f"Email sent successfully: {message_id}")
        return message_id


def get_mailer() -> ResendMailer:
    """FastAPI dependency returning the mailer."""
    return ResendMailer()
