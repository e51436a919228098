# 📄 File: patient_api/modules/notifications/presentation/api/v1/notifications.py
# 🧭 Purpose (Layman Explanation):
# The web endpoints that send emails: contact form messages, the consultation document and the
# welcome email.
#
# 🧪 Purpose (Technical Summary):
# FastAPI notification endpoints over ContactService, DocumentEmailService,
# ConsultationDocumentService and WelcomeEmailService. Contact and document generation are
# rate limited; the market for generated documents comes from the Origin header or host.
#
# 🔗 Dependencies:
# - FastAPI router, slowapi limiter
# - notification domain services and schemas, market service
#
# 🔄 Connected Modules / Calls From:
# - patient_api.api.v1.router (mounted at /notifications)

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from patient_api.modules.markets.domain.services.market_service import (
    detect_market_from_hostname,
    detect_market_from_origin,
    get_market_config,
)
from patient_api.modules.notifications.domain.services.contact_service import ContactService
from patient_api.modules.notifications.domain.services.document_service import (
    ConsultationDocumentService,
    DocumentEmailService,
)
from patient_api.modules.notifications.domain.services.welcome_service import WelcomeEmailService
from patient_api.modules.notifications.presentation.api.schemas.notification_schemas import (
    ContactEmailRequest,
    ContactEmailResponse,
    GenerateDocumentResponse,
    GeneratePdfDocumentRequest,
    GeneratePdfDocumentResponse,
    WelcomeEmailRequest,
    WelcomeEmailResponse,
)
from patient_api.shared.core.dependencies import CurrentUser, get_current_user
from patient_api.shared.core.rate_limiter import contact_limit, document_limit, limiter

logger = logging.getLogger(__name__)

notifications_router = APIRouter()


@notifications_router.post(
    "/send-contact-email",
    response_model=ContactEmailResponse,
    summary="Send contact email",
    description="Forward a contact form submission to the support inbox",
    responses={429: {"description": "Too many messages"}, 502: {"description": "Email provider failed"}}
)
@limiter.limit(contact_limit)
async def send_contact_email(
    request: Request,
    payload: ContactEmailRequest,
    contact_service: ContactService = Depends(),
) -> ContactEmailResponse:
    message_id = await contact_service.send_contact_email(payload.email, payload.title, payload.content)
    logger.info(f"Contact email sent successfully: {message_id}")
    return ContactEmailResponse(message_id=message_id)


@notifications_router.post(
    "/generate-pdf-document",
    response_model=GeneratePdfDocumentResponse,
    response_model_exclude_none=True,
    summary="Email a document as PDF",
    description="Render HTML to PDF and email it; falls back to an HTML email when PDF rendering fails",
    responses={400: {"description": "HTML content or email missing"}}
)
async def generate_pdf_document(
    payload: GeneratePdfDocumentRequest,
    document_email_service: DocumentEmailService = Depends(),
) -> GeneratePdfDocumentResponse:
    delivery = await document_email_service.generate_pdf_document(
        html_content=payload.html_content,
        user_name=payload.user_name,
        user_email=payload.user_email,
    )
    return GeneratePdfDocumentResponse(**delivery.model_dump())


@notifications_router.post(
    "/generate-document",
    response_model=GenerateDocumentResponse,
    summary="Generate consultation document",
    description=(
        "Build the caller's consultation document from stored answers and email it. "
        "Repeated requests within two minutes skip the email."
    ),
    responses={401: {"description": "Not authenticated"}, 429: {"description": "Too many requests"}}
)
@limiter.limit(document_limit)
async def generate_document(
    request: Request,
    origin: Optional[str] = Header(None),
    current_user: CurrentUser = Depends(get_current_user),
    document_service: ConsultationDocumentService = Depends(),
) -> GenerateDocumentResponse:
    if origin:
        market = detect_market_from_origin(origin)
    else:
        market = get_market_config(detect_market_from_hostname(request.url.hostname))

    document = await document_service.generate_document(current_user, market)
    return GenerateDocumentResponse(**document.model_dump())


@notifications_router.post(
    "/send-welcome-email",
    response_model=WelcomeEmailResponse,
    response_model_exclude_none=True,
    summary="Send welcome email",
    description="Send the caller's welcome email once; later calls are skipped",
    responses={401: {"description": "Not authenticated"}, 404: {"description": "No subscription"}}
)
async def send_welcome_email(
    payload: WelcomeEmailRequest,
    current_user: CurrentUser = Depends(get_current_user),
    welcome_service: WelcomeEmailService = Depends(),
) -> WelcomeEmailResponse:
    result = await welcome_service.send_welcome_email(
        user_id=current_user.user_id,
        email=current_user.email,
        first_name=payload.first_name or current_user.first_name,
        is_paid=payload.is_paid,
        market_code=payload.market_code,
    )
    return WelcomeEmailResponse(**result.model_dump())
