# 📄 File: patient_api/modules/notifications/presentation/api/schemas/notification_schemas.py
# 🧭 Purpose (Layman Explanation):
# Defines what the website sends to request emails and documents, and what it gets back.
# 🧪 Purpose (Technical Summary):
# Pydantic request/response schemas for the notification endpoints, camelCase on the wire.
# 🔗 Dependencies:
# pydantic
# 🔄 Connected Modules / Calls From:
# patient_api.modules.notifications.presentation.api.v1.notifications

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContactEmailRequest(CamelModel):
    email: EmailStr
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=10000)


class ContactEmailResponse(CamelModel):
    success: bool = True
    message_id: Optional[str] = None


class GeneratePdfDocumentRequest(CamelModel):
    html_content: Optional[str] = Field(None, description="Rendered consultation document")
    user_name: Optional[str] = None
    user_email: Optional[EmailStr] = None


class GeneratePdfDocumentResponse(CamelModel):
    success: bool = True
    message: str
    fallback_to_html: bool = False
    pdf_base64: Optional[str] = None
    message_id: Optional[str] = None


class GenerateDocumentResponse(CamelModel):
    success: bool = True
    message: str
    skipped: bool = False
    document_content: str


class WelcomeEmailRequest(CamelModel):
    first_name: Optional[str] = None
    is_paid: bool = False
    market_code: Optional[str] = Field(None, description="UK, US or AU; defaults to UK")


class WelcomeEmailResponse(CamelModel):
    success: bool = True
    skipped: bool = False
    message: Optional[str] = None
    message_id: Optional[str] = None
    idempotency_key: Optional[str] = None
