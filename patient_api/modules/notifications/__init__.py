# 📄 File: patient_api/modules/notifications/__init__.py
# 🧭 Purpose (Layman Explanation):
# Sends the emails: contact form messages, the welcome email and the consultation document.
# 🧪 Purpose (Technical Summary):
# Notifications module: Resend mailer, HTML to PDF client, contact/welcome/document services
# and the notification endpoints.
# 🔗 Dependencies:
# resend, aiohttp, Jinja2, FastAPI
# 🔄 Connected Modules / Calls From:
# patient_api.api.v1.router, payments webhook service

"""
Notifications Module

- Domain: ContactService, WelcomeEmailService, DocumentEmailService, ConsultationDocumentService
- Infrastructure: ResendMailer, HtmlPdfClient
- Presentation: /notifications endpoints
"""
