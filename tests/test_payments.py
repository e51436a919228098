import json
from datetime import datetime, timedelta, timezone

import pytest
import stripe

from conftest import VALID_SIGNATURE, FakeMailer
from patient_api.modules.notifications.domain.services.welcome_service import WelcomeEmailService
from patient_api.modules.payments.domain.models.discount import CouponInfo
from patient_api.modules.payments.domain.models.subscription import SubscriptionStatus, SubscriptionType
from patient_api.modules.payments.domain.services.discount_service import (
    DiscountType,
    apply_coupon,
    is_below_minimum_charge,
    to_minor_units,
)
from patient_api.modules.payments.domain.services.payment_service import PaymentService
from patient_api.modules.payments.domain.services.webhook_service import WebhookService
from patient_api.modules.payments.infrastructure.database.subscription_repository_impl import (
    SubscriptionRepositoryImpl,
    WebhookEventRepositoryImpl,
)
from patient_api.modules.payments.infrastructure.external.stripe_gateway import CustomerInfo, configure_stripe_client
from patient_api.shared.config.settings import get_settings
from patient_api.shared.core.dependencies import CurrentUser

AU_ORIGIN = "https://menopause.the-empowered-patient.com.au"


def _subscription(client, headers):
    return client.get("/api/v1/payments/subscriptions/me", headers=headers).json()


def _checkout_completed_event(event_id, customer_id="cus_1", user_id=None, amount_total=1900):
    return json.dumps({
        "id": event_id,
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": f"cs_{event_id}",
                "payment_status": "paid",
                "customer": customer_id,
                "amount_total": amount_total,
                "currency": "gbp",
                "metadata": {"user_id": user_id} if user_id else {},
            }
        },
    })


async def _expired_paid_subscription(repository, user_id):
    return await repository.upsert(user_id, {
        "subscription_type": SubscriptionType.PAID,
        "status": SubscriptionStatus.ACTIVE,
        "stripe_session_id": "cs_old",
        "amount_paid": 19,
        "expires_at": datetime.now(timezone.utc) - timedelta(days=1),
    })


@pytest.mark.parametrize(
    "coupon, discount, final",
    [
        (CouponInfo(percent_off=25), 4.75, 14.25),
        (CouponInfo(percent_off=33.33), 6.33, 12.67),
        (CouponInfo(amount_off=500), 5.0, 14.0),
        (CouponInfo(amount_off=2500), 25.0, 0.0),
        (CouponInfo(percent_off=100), 19.0, 0.0),
    ],
)
def test_apply_coupon(coupon, discount, final):
    quote = apply_coupon(19, coupon, "gbp")

    assert quote.discount_amount == discount
    assert quote.final_amount == final
    assert quote.currency == "gbp"


def test_coupon_types():
    assert apply_coupon(19, CouponInfo(percent_off=10), "gbp").discount_type == DiscountType.PERCENTAGE
    assert apply_coupon(19, CouponInfo(amount_off=100, currency="AUD"), "gbp").currency == "aud"


def test_minimum_charge_and_minor_units():
    assert is_below_minimum_charge(0, 0.5)
    assert is_below_minimum_charge(0.49, 0.5)
    assert not is_below_minimum_charge(0.5, 0.5)
    assert to_minor_units(19.99) == 1999
    assert to_minor_units(0.1 + 0.2) == 30


def test_create_payment_requires_authentication(client):
    response = client.post("/api/v1/payments/create-payment", json={"amount": 10})

    assert response.status_code == 401


def test_amount_below_minimum_grants_free_access_without_stripe(client, auth_headers, stripe_gateway):
    headers = auth_headers("user-free")

    response = client.post("/api/v1/payments/create-payment", headers=headers, json={"amount": 0.3})

    assert response.status_code == 200
    body = response.json()
    assert body["freeAccess"] is True
    assert body["url"] == "http://localhost:5173/payment-success?free_access=true"
    assert stripe_gateway.created_sessions == []

    subscription = _subscription(client, headers)
    assert subscription["subscriptionType"] == "free"
    assert subscription["status"] == "active"
    assert subscription["hasAccess"] is True
    assert subscription["expiresAt"] is None


def test_create_payment_opens_checkout_in_market_currency(client, auth_headers, stripe_gateway):
    headers = auth_headers("user-au")

    response = client.post(
        "/api/v1/payments/create-payment",
        headers={**headers, "Origin": AU_ORIGIN},
        json={"amount": 10, "discountCode": "SPRING"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["freeAccess"] is False
    assert body["sessionId"] == "cs_test_1"

    params = stripe_gateway.created_sessions[0]
    price_data = params["line_items"][0]["price_data"]
    assert price_data["currency"] == "aud"
    assert price_data["unit_amount"] == 1000
    assert params["metadata"] == {"user_id": "user-au"}
    assert params["success_url"].startswith(f"{AU_ORIGIN}/payment-success?session_id=")
    assert params["customer_email"] == "user-au@example.com"


def test_verify_payment_requires_session_id(client, auth_headers):
    response = client.post("/api/v1/payments/verify-payment", headers=auth_headers("user-v"), json={})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BAD_REQUEST"


def test_verify_unpaid_session(client, auth_headers, stripe_gateway):
    stripe_gateway.add_session("cs_unpaid", "user-v", paid=False)

    response = client.post(
        "/api/v1/payments/verify-payment",
        headers=auth_headers("user-v"),
        json={"sessionId": "cs_unpaid"},
    )

    assert response.json() == {"success": False, "verified": False}
    assert _subscription(client, auth_headers("user-v"))["status"] is None


def test_verify_payment_is_idempotent(client, auth_headers, stripe_gateway):
    headers = auth_headers("user-v")
    stripe_gateway.add_session("cs_paid", "user-v")

    first = client.post("/api/v1/payments/verify-payment", headers=headers, json={"sessionId": "cs_paid"})
    subscription = _subscription(client, headers)
    second = client.post("/api/v1/payments/verify-payment", headers=headers, json={"sessionId": "cs_paid"})

    assert first.json() == {"success": True, "verified": True}
    assert second.json() == {"success": True, "verified": True}
    assert subscription["subscriptionType"] == "paid"
    assert subscription["amountPaid"] == 19.0
    assert subscription["currency"] == "gbp"
    assert subscription["expiresAt"] is not None
    assert _subscription(client, headers) == subscription


def test_verify_session_of_another_user_is_forbidden(client, auth_headers, stripe_gateway):
    stripe_gateway.add_session("cs_other", "someone-else")

    response = client.post(
        "/api/v1/payments/verify-payment",
        headers=auth_headers("user-v"),
        json={"sessionId": "cs_other"},
    )

    assert response.status_code == 403


async def test_verify_payment_renews_expired_subscription(session, stripe_gateway):
    repository = SubscriptionRepositoryImpl(session)
    expired = await _expired_paid_subscription(repository, "user-renew")
    stripe_gateway.add_session("cs_new", "user-renew")

    service = PaymentService(subscription_repository=repository, stripe_gateway=stripe_gateway)
    result = await service.verify_payment(CurrentUser("user-renew", "renew@example.com"), "cs_new")

    assert result.verified is True
    assert result.subscription.id == expired.id
    assert result.subscription.stripe_session_id == "cs_new"
    assert result.subscription.grants_access()


def test_validate_discount_requires_code(client):
    response = client.post("/api/v1/payments/validate-discount", json={"discountCode": "  ", "amount": 19})

    assert response.status_code == 400
    assert response.json() == {"valid": False, "error": "Discount code is required"}


def test_validate_unknown_discount(client):
    response = client.post("/api/v1/payments/validate-discount", json={"discountCode": "NOPE", "amount": 19})

    assert response.status_code == 200
    assert response.json() == {"valid": False, "error": "Invalid or expired discount code"}


def test_validate_discount(client, stripe_gateway):
    stripe_gateway.add_promotion("SPRING25", percent_off=25)

    response = client.post("/api/v1/payments/validate-discount", json={"discountCode": " SPRING25 ", "amount": 19})

    assert response.status_code == 200
    assert response.json() == {
        "valid": True,
        "discountAmount": 4.75,
        "finalAmount": 14.25,
        "discountType": "percentage",
        "discountValue": 25.0,
        "currency": "gbp",
    }


REGISTRATION = {
    "email": "jane@example.com",
    "password": "s3cret-pass",
    "firstName": "Jane",
    "lastName": "Doe",
}


def test_registration_requires_all_fields(client):
    response = client.post("/api/v1/payments/register-with-discount", json={"email": "jane@example.com"})

    assert response.status_code == 400


def test_registration_with_free_code_grants_access(client, stripe_gateway, auth_gateway):
    stripe_gateway.add_promotion("FREEACCESS", percent_off=100)

    response = client.post(
        "/api/v1/payments/register-with-discount",
        json={**REGISTRATION, "discountCode": "FREEACCESS"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["freeAccess"] is True
    assert body["redirectTo"] == "/welcome"
    assert body["discountAmount"] == 19.0
    assert stripe_gateway.created_sessions == []

    headers = {"Authorization": f"Bearer {body['userId']}"}
    assert _subscription(client, headers)["subscriptionType"] == "free"


def test_registration_without_code_redirects_to_checkout(client, stripe_gateway):
    response = client.post("/api/v1/payments/register-with-discount", json=REGISTRATION)

    body = response.json()
    assert body["stripeRedirect"] is True
    assert body["redirectTo"] == "https://checkout.stripe.com/c/pay/cs_test_1"
    assert body["finalAmount"] == 19.0
    assert stripe_gateway.created_customers[0]["name"] == "Jane Doe"
    assert stripe_gateway.created_sessions[0]["metadata"]["discount_code_applied"] == "none"

    headers = {"Authorization": f"Bearer {body['userId']}"}
    subscription = _subscription(client, headers)
    assert subscription["status"] == "pending"
    assert subscription["hasAccess"] is False


def test_registration_with_partial_discount(client, stripe_gateway):
    stripe_gateway.add_promotion("HALF", percent_off=50)

    body = client.post(
        "/api/v1/payments/register-with-discount",
        json={**REGISTRATION, "discountCode": "HALF"},
    ).json()

    assert body["discountApplied"] is True
    assert body["finalAmount"] == 9.5
    assert "reduced from £19.00 to £9.50" in body["message"]
    assert stripe_gateway.created_sessions[0]["discounts"] == [{"promotion_code": "promo_half"}]


def test_registration_with_invalid_code_creates_nothing(client, auth_gateway):
    response = client.post(
        "/api/v1/payments/register-with-discount",
        json={**REGISTRATION, "discountCode": "BOGUS"},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is False
    assert "BOGUS" in body["error"]
    assert auth_gateway.users == {}


def test_registration_continues_when_discount_lookup_fails(client, stripe_gateway):
    stripe_gateway.fail_promotion_lookup = True

    body = client.post(
        "/api/v1/payments/register-with-discount",
        json={**REGISTRATION, "discountCode": "SPRING"},
    ).json()

    assert body["success"] is True
    assert body["discountApplied"] is False
    assert body["finalAmount"] == 19.0


def test_registration_with_existing_email_conflicts(client, auth_gateway):
    auth_gateway.add_user("existing", email="jane@example.com", first_name="Jane")

    response = client.post("/api/v1/payments/register-with-discount", json=REGISTRATION)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT_ERROR"


def test_existing_user_with_free_code_gets_access(client, auth_gateway, stripe_gateway, auth_headers):
    auth_gateway.add_user("existing", email="jane@example.com", first_name="Jane")
    stripe_gateway.add_promotion("FREEACCESS", percent_off=100)

    body = client.post(
        "/api/v1/payments/register-with-discount",
        json={**REGISTRATION, "discountCode": "FREEACCESS"},
    ).json()

    assert body["userExists"] is True
    assert body["userId"] == "existing"
    assert _subscription(client, auth_headers("existing"))["hasAccess"] is True


def test_webhook_rejects_bad_signature(client):
    response = client.post(
        "/api/v1/payments/webhook",
        content=_checkout_completed_event("evt_1"),
        headers={"Stripe-Signature": "t=1,v1=forged"},
    )

    assert response.status_code == 400


def test_webhook_activates_subscription_and_sends_welcome_once(client, auth_gateway, stripe_gateway, mailer, auth_headers):
    auth_gateway.add_user("user-w", email="paid@example.com", first_name="Mary")
    stripe_gateway.customers["cus_1"] = CustomerInfo(id="cus_1", email="paid@example.com")

    first = client.post(
        "/api/v1/payments/webhook",
        content=_checkout_completed_event("evt_1"),
        headers={"Stripe-Signature": VALID_SIGNATURE},
    )
    duplicate = client.post(
        "/api/v1/payments/webhook",
        content=_checkout_completed_event("evt_1"),
        headers={"Stripe-Signature": VALID_SIGNATURE},
    )
    another = client.post(
        "/api/v1/payments/webhook",
        content=_checkout_completed_event("evt_2"),
        headers={"Stripe-Signature": VALID_SIGNATURE},
    )

    assert first.json() == {"received": True, "processed": True}
    assert duplicate.json() == {"received": True, "processed": False, "reason": "duplicate"}
    assert another.status_code == 200

    subscription = _subscription(client, auth_headers("user-w"))
    assert subscription["subscriptionType"] == "paid"
    assert subscription["welcomeEmailSent"] is True

    assert len(mailer.sent) == 1
    assert mailer.sent[0].to == ["paid@example.com"]
    assert mailer.sent[0].headers == {"X-Idempotency-Key": "welcome_user-w"}


def test_webhook_prefers_metadata_user_id(client, stripe_gateway, auth_headers):
    headers = auth_headers("user-meta")
    stripe_gateway.customers["cus_1"] = CustomerInfo(id="cus_1", email="billing@example.com")

    response = client.post(
        "/api/v1/payments/webhook",
        content=_checkout_completed_event("evt_meta", user_id="user-meta"),
        headers={"Stripe-Signature": VALID_SIGNATURE},
    )

    assert response.json()["processed"] is True
    assert _subscription(client, headers)["status"] == "active"


@pytest.mark.parametrize(
    "customer, reason",
    [
        (None, "customer_deleted"),
        ("no-email", "no_email"),
        ("stranger@example.com", "user_not_found"),
    ],
)
def test_webhook_skips_unresolvable_customers(client, stripe_gateway, customer, reason):
    if customer == "no-email":
        stripe_gateway.customers["cus_1"] = CustomerInfo(id="cus_1")
    elif customer:
        stripe_gateway.customers["cus_1"] = CustomerInfo(id="cus_1", email=customer)

    response = client.post(
        "/api/v1/payments/webhook",
        content=_checkout_completed_event("evt_skip"),
        headers={"Stripe-Signature": VALID_SIGNATURE},
    )

    assert response.status_code == 200
    assert response.json() == {"received": True, "processed": False, "reason": reason}


def test_webhook_acknowledges_other_event_types(client):
    payload = json.dumps({"id": "evt_other", "type": "payment_intent.created", "data": {"object": {}}})

    response = client.post(
        "/api/v1/payments/webhook",
        content=payload,
        headers={"Stripe-Signature": VALID_SIGNATURE},
    )

    assert response.json() == {"received": True, "processed": True}


async def test_webhook_renews_expired_subscription(session, stripe_gateway, auth_gateway):
    auth_gateway.add_user("user-renew", email="renew@example.com")
    stripe_gateway.customers["cus_1"] = CustomerInfo(id="cus_1", email="renew@example.com")
    repository = SubscriptionRepositoryImpl(session)
    await _expired_paid_subscription(repository, "user-renew")

    service = WebhookService(
        subscription_repository=repository,
        webhook_event_repository=WebhookEventRepositoryImpl(session),
        stripe_gateway=stripe_gateway,
        auth_gateway=auth_gateway,
        welcome_email_service=WelcomeEmailService(subscription_repository=repository, mailer=FakeMailer()),
    )
    result = await service.handle(
        _checkout_completed_event("evt_renew", user_id="user-renew").encode(),
        VALID_SIGNATURE,
    )

    renewed = await repository.get_by_user_id("user-renew")
    assert result.processed is True
    assert renewed.stripe_session_id == "cs_evt_renew"
    assert renewed.grants_access()


def test_stripe_client_uses_configured_timeout_and_retries(monkeypatch):
    monkeypatch.setattr(stripe, "default_http_client", None)
    monkeypatch.setattr(stripe, "max_network_retries", 0)
    monkeypatch.setenv("STRIPE_TIMEOUT_SECONDS", "12")
    monkeypatch.setenv("STRIPE_MAX_NETWORK_RETRIES", "3")

    configure_stripe_client(get_settings())

    assert stripe.max_network_retries == 3
    assert isinstance(stripe.default_http_client, stripe.RequestsClient)
    assert stripe.default_http_client._timeout == 12
