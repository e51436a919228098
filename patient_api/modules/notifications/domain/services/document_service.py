# 📄 File: patient_api/modules/notifications/domain/services/document_service.py
# 🧭 Purpose (Layman Explanation):
# Produces the patient's consultation document (their answers plus a symptom score table) and
# emails it to them, as a PDF when possible and otherwise inside the email itself.
# 🧪 Purpose (Technical Summary):
# Document email delivery with a single PDF to HTML fallback, and generation of the branded
# consultation document from stored responses with a duplicate-send guard kept in Supabase
# user metadata (last_document_email_time, epoch milliseconds).
# 🔗 Dependencies:
# ResendMailer, HtmlPdfClient, ResponseService, SupabaseAuthGateway, market service, Jinja2
# 🔄 Connected Modules / Calls From:
# patient_api.modules.notifications.presentation.api.v1.notifications

import base64
import logging
import re
import time
from datetime import date
from typing import Dict, List, Optional

from fastapi import Depends
from pydantic import BaseModel

from patient_api.modules.consultation.domain.catalog import CONSULTATION_MODULES
from patient_api.modules.consultation.domain.models.question import QuestionType
from patient_api.modules.consultation.domain.services.response_service import (
    ConsultationSummary,
    ResponseService,
)
from patient_api.modules.markets.domain.models.market import MarketConfig
from patient_api.modules.notifications.infrastructure.external.htmlpdf_client import (
    HtmlPdfClient,
    get_pdf_client,
)
from patient_api.modules.notifications.infrastructure.external.resend_mailer import (
    EmailAttachment,
    EmailMessage,
    ResendMailer,
    get_mailer,
)
from patient_api.shared.config.settings import get_settings
from patient_api.shared.core.dependencies import CurrentUser
from patient_api.shared.core.exceptions import (
    BadRequestError,
    ConfigurationError,
    ExternalServiceError,
)
from patient_api.shared.infrastructure.external.supabase_auth import (
    SupabaseAuthGateway,
    get_supabase_auth_gateway,
)
from patient_api.shared.utils.templates import render_template

logger = logging.getLogger(__name__)

LAST_DOCUMENT_EMAIL_KEY = "last_document_email_time"

GENERAL_HINTS = [
    (
        "As well as collecting all this information it is likely that your {doctor} or nurse will also want "
        "to measure your height and weight, blood pressure and pulse rate. So wear shoes that are easy to "
        "slip off and wear a loose shirt to make this process easier."
    ),
    (
        "When booking your appointment please ensure that the medical receptionist knows that this "
        "appointment is for a Menopause Health Assessment."
    ),
    (
        "Please note that if you have not had a cervical screening (what we used to call a pap smear) in "
        "the past 5 years then ensure you tell the medical receptionist this at the time of booking the "
        "appointment so that they can allow time and resources for this to be done on the day."
    ),
]
CLOSING_HINT = "Print out and bring this document with you to your consultation!"


class DocumentDelivery(BaseModel):
    success: bool = True
    message: str
    fallback_to_html: bool = False
    pdf_base64: Optional[str] = None
    message_id: Optional[str] = None


class GeneratedDocument(BaseModel):
    success: bool = True
    message: str
    skipped: bool = False
    document_content: str


class AnsweredText(BaseModel):
    question: str
    answer: Optional[str] = None


class DocumentSection(BaseModel):
    name: Optional[str] = None
    answers: List[AnsweredText]


class DocumentModule(BaseModel):
    title: str
    sections: List[DocumentSection]


def pdf_filename(user_name: str, on: Optional[date] = None) -> str:
    safe_name = re.sub(r"\s+", "_", (user_name or "Patient").strip())
    return f"Menopause_Consultation_{safe_name}_{(on or date.today()).isoformat()}.pdf"


def detailed_modules(summary: ConsultationSummary) -> List[DocumentModule]:
    """Free-text answers grouped by module and section, in questionnaire order."""
    summaries = {module.module_id: module for module in summary.modules}
    modules = []

    for module in CONSULTATION_MODULES:
        text_ids = {q.id for q in module.questions if q.type == QuestionType.TEXT}
        module_summary = summaries.get(module.id)
        if not text_ids or module_summary is None:
            continue

        sections: Dict[Optional[str], List[AnsweredText]] = {}
        for answered in module_summary.answers:
            if answered.question_id not in text_ids:
                continue
            sections.setdefault(answered.section, []).append(
                AnsweredText(question=answered.question, answer=answered.answer)
            )

        modules.append(DocumentModule(
            title=module.title,
            sections=[DocumentSection(name=name, answers=answers) for name, answers in sections.items()],
        ))

    return modules


def helpful_hints(market: MarketConfig) -> List[str]:
    hints = [hint.format(doctor=market.terminology.doctor) for hint in GENERAL_HINTS]
    hints.append(market.helpful_hints.mammogram_info.text)
    if market.helpful_hints.rebate_info is not None:
        hints.append(market.helpful_hints.rebate_info.text)
    hints.append(CLOSING_HINT)
    return hints


class DocumentEmailService:
    """Emails a consultation document, as a PDF attachment or inline HTML."""

    def __init__(
        self,
        mailer: ResendMailer = Depends(get_mailer),
        pdf_client: HtmlPdfClient = Depends(get_pdf_client),
    ):
        self.mailer = mailer
        self.pdf_client = pdf_client
        self.settings = get_settings()

    async def send_document_email(
        self,
        email: str,
        user_name: Optional[str],
        document_html: Optional[str] = None,
        pdf: Optional[bytes] = None,
    ) -> str:
        """Send the document email; a PDF is attached, otherwise the HTML is embedded."""
        name = user_name or "Patient"
        context = {
            "user_name": name,
            "has_attachment": pdf is not None,
            "document_html": None if pdf is not None else document_html,
            "support_email": self.settings.SUPPORT_EMAIL,
            "logo_url": self.settings.EMAIL_LOGO_URL,
        }
        attachments = [EmailAttachment(filename=pdf_filename(name), content=pdf)] if pdf is not None else []

        return await self.mailer.send(EmailMessage(
            sender=self.settings.EMAIL_FROM,
            to=[email],
            subject=self.settings.DOCUMENT_EMAIL_SUBJECT,
            html=render_template("document_email.html", context),
            text=render_template("document_email.txt", context),
            attachments=attachments,
        ))

    async def generate_pdf_document(
        self,
        html_content: Optional[str],
        user_name: Optional[str],
        user_email: Optional[str],
    ) -> DocumentDelivery:
        """
        Render HTML to PDF and email it, falling back to an HTML email.

        Raises:
            BadRequestError: If the HTML or the recipient is missing
            ExternalServiceError: If the fallback email fails as well
        """
        if not html_content or not user_email:
            raise BadRequestError("htmlContent and userEmail are required")

        logger.info(f"Received PDF generation request for {user_email}")

        try:
            pdf = await self.pdf_client.render(html_content)
            message_id = await self.send_document_email(user_email, user_name, pdf=pdf)
        except (ExternalServiceError, ConfigurationError) as e:
            logger.warning(f"PDF generation failed, falling back to HTML email: {e.message}")
            message_id = await self.send_document_email(user_email, user_name, document_html=html_content)
            return DocumentDelivery(
                message="HTML document sent successfully (PDF generation unavailable)",
                fallback_to_html=True,
                message_id=message_id,
            )

        return DocumentDelivery(
            message="PDF document generated and sent successfully",
            pdf_base64=base64.b64encode(pdf).decode("ascii"),
            message_id=message_id,
        )


class ConsultationDocumentService:
    """Builds the consultation document from stored answers and emails it."""

    def __init__(
        self,
        response_service: ResponseService = Depends(),
        document_email_service: DocumentEmailService = Depends(),
        auth_gateway: SupabaseAuthGateway = Depends(get_supabase_auth_gateway),
    ):
        self.response_service = response_service
        self.document_email_service = document_email_service
        self.auth_gateway = auth_gateway
        self.settings = get_settings()

    async def build_document(self, user_name: str, user_id: str, market: MarketConfig) -> str:
        summary = await self.response_service.build_summary(user_id)
        flat = await self.response_service.get_flat_responses(user_id)

        return render_template("consultation_document.html", {
            "user_name": user_name,
            "created_on": date.today(),
            "brand_name": f"Menopause {market.code.value}",
            "logo_url": self.settings.EMAIL_LOGO_URL,
            "helpful_hints": helpful_hints(market),
            "top_three_symptoms": flat.get("top_three_symptoms"),
            "greene_scale": summary.greene_scale,
            "detailed_modules": detailed_modules(summary),
        })

    def _recently_sent(self, user: CurrentUser, now_ms: int) -> bool:
        last_sent = user.user_metadata.get(LAST_DOCUMENT_EMAIL_KEY)
        try:
            last_sent_ms = int(last_sent)
        except (TypeError, ValueError):
            return False
        return now_ms - last_sent_ms < self.settings.DOCUMENT_RESEND_WINDOW_SECONDS * 1000

    async def generate_document(self, user: CurrentUser, market: MarketConfig) -> GeneratedDocument:
        """
        Build the document and email it, skipping the email when one went out recently.

        Raises:
            BadRequestError: If the account has no email address
        """
        if not user.email:
            raise BadRequestError("User email not available")

        user_name = user.first_name or "Patient"
        document = await self.build_document(user_name, user.user_id, market)

        now_ms = int(time.time() * 1000)
        if self._recently_sent(user, now_ms):
            logger.info(f"Recent document email found for user {user.user_id}, skipping duplicate send")
            return GeneratedDocument(
                message="Document email was recently sent, skipping duplicate",
                skipped=True,
                document_content=document,
            )

        await self.document_email_service.send_document_email(user.email, user_name, document_html=document)
        await self.auth_gateway.update_user_metadata(
            user.user_id,
            {**user.user_metadata, LAST_DOCUMENT_EMAIL_KEY: now_ms},
        )

        logger.info(f"Document email sent to user {user.user_id}")
        return GeneratedDocument(
            message="Document generated and email sent successfully",
            document_content=document,
        )
