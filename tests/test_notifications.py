import base64

from patient_api.modules.notifications.domain.services.document_service import LAST_DOCUMENT_EMAIL_KEY, pdf_filename

DOCUMENT_HTML = "<html><body><h1>My Consultation</h1></body></html>"


def test_contact_email_goes_to_support(client, mailer):
    response = client.post(
        "/api/v1/notifications/send-contact-email",
        json={"email": "patient@example.com", "title": "Hello", "content": "I have a <question>."},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "messageId": "msg_1"}

    message = mailer.sent[0]
    assert message.to == ["support@the-empowered-patient.org"]
    assert message.reply_to == "patient@example.com"
    assert message.subject == "Contact Form: Hello"
    assert "&lt;question&gt;" in message.html


def test_contact_email_validates_input(client, mailer):
    response = client.post(
        "/api/v1/notifications/send-contact-email",
        json={"email": "not-an-email", "title": "", "content": "Hi"},
    )

    assert response.status_code == 422
    assert mailer.sent == []


def test_contact_email_provider_failure(client, mailer):
    mailer.fail = True

    response = client.post(
        "/api/v1/notifications/send-contact-email",
        json={"email": "patient@example.com", "title": "Hello", "content": "Hi"},
    )

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "EXTERNAL_SERVICE_ERROR"


def test_pdf_document_is_attached(client, mailer, pdf_client):
    response = client.post(
        "/api/v1/notifications/generate-pdf-document",
        json={"htmlContent": DOCUMENT_HTML, "userName": "Jane Doe", "userEmail": "jane@example.com"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["fallbackToHtml"] is False
    assert base64.b64decode(body["pdfBase64"]) == b"%PDF-1.4 consultation"
    assert pdf_client.rendered == [DOCUMENT_HTML]

    attachment = mailer.sent[0].attachments[0]
    assert attachment.filename.startswith("Menopause_Consultation_Jane_Doe_")
    assert attachment.filename.endswith(".pdf")


def test_pdf_failure_falls_back_to_html_email(client, mailer, pdf_client):
    pdf_client.fail = True

    response = client.post(
        "/api/v1/notifications/generate-pdf-document",
        json={"htmlContent": DOCUMENT_HTML, "userName": "Jane", "userEmail": "jane@example.com"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["fallbackToHtml"] is True
    assert "pdfBase64" not in body

    message = mailer.sent[0]
    assert message.attachments == []
    assert "<h1>My Consultation</h1>" in message.html


def test_pdf_document_requires_html_and_email(client, mailer):
    response = client.post("/api/v1/notifications/generate-pdf-document", json={"userName": "Jane"})

    assert response.status_code == 400
    assert mailer.sent == []


def test_pdf_filename_replaces_whitespace():
    assert pdf_filename("Mary  Ann Smith").startswith("Menopause_Consultation_Mary_Ann_Smith_")
    assert pdf_filename("").startswith("Menopause_Consultation_Patient_")


def test_welcome_email_requires_subscription(client, auth_headers):
    response = client.post(
        "/api/v1/notifications/send-welcome-email",
        headers=auth_headers("user-new"),
        json={},
    )

    assert response.status_code == 404


def test_welcome_email_is_sent_once(client, subscriber_headers, mailer):
    first = client.post(
        "/api/v1/notifications/send-welcome-email",
        headers=subscriber_headers,
        json={"isPaid": False, "marketCode": "AU"},
    )
    second = client.post(
        "/api/v1/notifications/send-welcome-email",
        headers=subscriber_headers,
        json={},
    )

    assert first.status_code == 200
    assert first.json()["idempotencyKey"] == "welcome_user-subscriber"
    assert second.json()["skipped"] is True
    assert len(mailer.sent) == 1
    assert "Jane" in mailer.sent[0].html
    assert "menopause.the-empowered-patient.com.au" in mailer.sent[0].html


def test_generate_document_requires_authentication(client):
    response = client.post("/api/v1/notifications/generate-document")

    assert response.status_code == 401


def test_generate_document_skips_recent_duplicates(client, subscriber_headers, mailer, auth_gateway):
    client.put(
        "/api/v1/consultation/modules/module_4/responses",
        headers=subscriber_headers,
        json={"responses": {"doctor_questions": "Is HRT right for me?"}},
    )

    first = client.post("/api/v1/notifications/generate-document", headers=subscriber_headers)
    second = client.post("/api/v1/notifications/generate-document", headers=subscriber_headers)

    assert first.status_code == 200
    assert first.json()["skipped"] is False
    assert "Is HRT right for me?" in first.json()["documentContent"]
    assert second.json()["skipped"] is True
    assert second.json()["documentContent"] == first.json()["documentContent"]

    assert len(mailer.sent) == 1
    assert mailer.sent[0].to == ["user-subscriber@example.com"]
    assert LAST_DOCUMENT_EMAIL_KEY in auth_gateway.users["user-subscriber"].user_metadata


def test_generate_document_uses_origin_market(client, subscriber_headers):
    response = client.post(
        "/api/v1/notifications/generate-document",
        headers={**subscriber_headers, "Origin": "https://menopause.the-empowered-patient.com.au"},
    )

    assert response.status_code == 200
    assert "Menopause AU" in response.json()["documentContent"]
