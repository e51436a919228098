import json
import os
from typing import Any, Callable, Dict, List, Optional

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

# Settings are read at import time, so the environment has to be in place first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from patient_api.main import create_application  # noqa: E402
from patient_api.modules.consultation.infrastructure.database import models as consultation_models  # noqa: E402,F401
from patient_api.modules.notifications.infrastructure.external.htmlpdf_client import get_pdf_client  # noqa: E402
from patient_api.modules.notifications.infrastructure.external.resend_mailer import (  # noqa: E402
    EmailMessage,
    get_mailer,
)
from patient_api.modules.payments.domain.models.discount import CouponInfo, PromotionCodeInfo  # noqa: E402
from patient_api.modules.payments.infrastructure.database import models as payment_models  # noqa: E402,F401
from patient_api.modules.payments.infrastructure.external.stripe_gateway import (  # noqa: E402
    CheckoutSessionInfo,
    CustomerInfo,
    WebhookEvent,
    get_stripe_gateway,
)
from patient_api.shared.config.settings import get_settings  # noqa: E402
from patient_api.shared.core.exceptions import (  # noqa: E402
    AuthenticationError,
    BadRequestError,
    ConflictError,
    ExternalServiceError,
)
from patient_api.shared.infrastructure.database.connection import Base  # noqa: E402
from patient_api.shared.infrastructure.external.supabase_auth import (  # noqa: E402
    AuthUser,
    get_supabase_auth_gateway,
)

VALID_SIGNATURE = "t=1,v1=valid"


class FakeAuthGateway:
    """In-memory Supabase auth; the access token is the user id."""

    def __init__(self):
        self.users: Dict[str, AuthUser] = {}
        self.metadata_updates: List[Dict[str, Any]] = []

    def add_user(self, user_id: str, email: Optional[str] = None, first_name: Optional[str] = None) -> AuthUser:
        metadata = {"first_name": first_name, "last_name": "Tester"} if first_name else {}
        user = AuthUser(id=user_id, email=email or f"{user_id}@example.com", user_metadata=metadata)
        self.users[user_id] = user
        return user

    async def get_user(self, access_token: str) -> AuthUser:
        if access_token not in self.users:
            raise AuthenticationError("User not authenticated")
        return self.users[access_token]

    async def create_user(self, email: str, password: str, first_name: str, last_name: str) -> AuthUser:
        if await self.find_user_by_email(email) is not None:
            raise ConflictError(
                "An account with this email already exists. Please sign in instead.",
                resource_type="user",
                conflict_field="email",
            )
        user = AuthUser(
            id=f"user-{len(self.users) + 1}",
            email=email,
            user_metadata={"first_name": first_name, "last_name": last_name},
        )
        self.users[user.id] = user
        return user

    async def find_user_by_email(self, email: str) -> Optional[AuthUser]:
        for user in self.users.values():
            if (user.email or "").lower() == email.strip().lower():
                return user
        return None

    async def update_user_metadata(self, user_id: str, metadata: Dict[str, Any]) -> None:
        self.metadata_updates.append(metadata)
        user = self.users[user_id]
        user.user_metadata = {**user.user_metadata, **metadata}


class FakeStripeGateway:
    """Records what the payment flow asks of Stripe."""

    def __init__(self):
        self.promotions: Dict[str, PromotionCodeInfo] = {}
        self.sessions: Dict[str, CheckoutSessionInfo] = {}
        self.customers: Dict[str, CustomerInfo] = {}
        self.created_sessions: List[Dict[str, Any]] = []
        self.created_customers: List[Dict[str, Any]] = []
        self.fail_promotion_lookup = False

    def add_promotion(self, code: str, percent_off: Optional[float] = None, amount_off: Optional[int] = None):
        self.promotions[code] = PromotionCodeInfo(
            id=f"promo_{code.lower()}",
            code=code,
            coupon=CouponInfo(percent_off=percent_off, amount_off=amount_off),
        )

    def add_session(self, session_id: str, user_id: Optional[str], paid: bool = True, amount_total: int = 1900):
        self.sessions[session_id] = CheckoutSessionInfo(
            id=session_id,
            payment_status="paid" if paid else "unpaid",
            customer_id="cus_test",
            amount_total=amount_total,
            currency="gbp",
            metadata={"user_id": user_id} if user_id else {},
        )

    async def find_promotion_code(self, code: str) -> Optional[PromotionCodeInfo]:
        if self.fail_promotion_lookup:
            raise ExternalServiceError("Stripe promotion code lookup failed", service="stripe")
        return self.promotions.get(code)

    async def find_customer_id(self, email: str) -> Optional[str]:
        for customer in self.customers.values():
            if customer.email == email:
                return customer.id
        return None

    async def create_customer(self, email: str, name: str, metadata: Dict[str, str]) -> str:
        customer_id = f"cus_{len(self.customers) + 1}"
        self.customers[customer_id] = CustomerInfo(id=customer_id, email=email)
        self.created_customers.append({"email": email, "name": name, "metadata": metadata})
        return customer_id

    async def retrieve_customer(self, customer_id: str) -> CustomerInfo:
        return self.customers.get(customer_id, CustomerInfo(id=customer_id, deleted=True))

    async def create_checkout_session(self, params: Dict[str, Any]) -> CheckoutSessionInfo:
        self.created_sessions.append(params)
        session_id = f"cs_test_{len(self.created_sessions)}"
        return CheckoutSessionInfo(id=session_id, url=f"https://checkout.stripe.com/c/pay/{session_id}")

    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionInfo:
        if session_id not in self.sessions:
            raise ExternalServiceError("Stripe checkout session retrieval failed", service="stripe")
        return self.sessions[session_id]

    def construct_webhook_event(self, payload: bytes, signature: Optional[str]) -> WebhookEvent:
        if signature != VALID_SIGNATURE:
            raise BadRequestError("Webhook signature verification failed", field="stripe-signature")
        event = json.loads(payload)
        return WebhookEvent(id=event["id"], type=event["type"], data_object=event["data"]["object"])


class FakeMailer:
    def __init__(self):
        self.sent: List[EmailMessage] = []
        self.fail = False

    async def send(self, message: EmailMessage) -> str:
        if self.fail:
            raise ExternalServiceError("Failed to send email via Resend", service="resend")
        self.sent.append(message)
        return f"msg_{len(self.sent)}"


class FakePdfClient:
    def __init__(self):
        self.fail = False
        self.rendered: List[str] = []

    async def render(self, html: str) -> bytes:
        if self.fail:
            raise ExternalServiceError("PDF API error: 500 Internal Server Error", service="htmlpdf")
        self.rendered.append(html)
        return b"%PDF-1.4 consultation"


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def auth_gateway() -> FakeAuthGateway:
    return FakeAuthGateway()


@pytest.fixture
def stripe_gateway() -> FakeStripeGateway:
    return FakeStripeGateway()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def pdf_client() -> FakePdfClient:
    return FakePdfClient()


@pytest.fixture
def app(tmp_path, monkeypatch, auth_gateway, stripe_gateway, mailer, pdf_client):
    db_path = tmp_path / "consultation-test.sqlite"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")
    monkeypatch.setenv("DB_AUTO_CREATE_TABLES", "true")
    get_settings.cache_clear()

    application = create_application()
    application.dependency_overrides[get_supabase_auth_gateway] = lambda: auth_gateway
    application.dependency_overrides[get_stripe_gateway] = lambda: stripe_gateway
    application.dependency_overrides[get_mailer] = lambda: mailer
    application.dependency_overrides[get_pdf_client] = lambda: pdf_client
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(auth_gateway) -> Callable[..., Dict[str, str]]:
    def _make(user_id: str, email: Optional[str] = None, first_name: Optional[str] = "Jane") -> Dict[str, str]:
        if user_id not in auth_gateway.users:
            auth_gateway.add_user(user_id, email=email, first_name=first_name)
        return {"Authorization": f"Bearer {user_id}"}

    return _make


@pytest.fixture
def subscriber_headers(client, auth_headers) -> Dict[str, str]:
    """Headers of a user who was granted free access."""
    headers = auth_headers("user-subscriber")
    response = client.post("/api/v1/payments/create-payment", headers=headers, json={"amount": 0})
    assert response.status_code == 200
    return headers


@pytest_asyncio.fixture
async def engine(tmp_path):
    """SQLite engine with every table created, for repository and service tests."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'repositories.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    async with async_sessionmaker(engine, expire_on_commit=False)() as db_session:
        yield db_session
