from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker

from patient_api.modules.consultation.infrastructure.database.response_repository_impl import ResponseRepositoryImpl
from patient_api.modules.payments.domain.models.subscription import (
    Subscription,
    SubscriptionStatus,
    SubscriptionType,
)
from patient_api.modules.payments.infrastructure.database.subscription_repository_impl import (
    SubscriptionRepositoryImpl,
    WebhookEventRepositoryImpl,
)
from patient_api.shared.core.exceptions import ConflictError


class StaleReadSubscriptionRepository(SubscriptionRepositoryImpl):
    """Misses the first lookup, like a request that read before a concurrent insert committed."""

    def __init__(self, session):
        super().__init__(session)
        self.missed_reads = 1

    async def _get_model(self, user_id):
        if self.missed_reads:
            self.missed_reads -= 1
            return None
        return await super()._get_model(user_id)


async def test_replace_drops_answers_missing_from_new_set(session):
    repository = ResponseRepositoryImpl(session)

    await repository.replace_module_responses(
        "user-a", "module_2a", {"current_medications": "Levothyroxine", "supplements": "Vitamin D"}, {}
    )
    await repository.replace_module_responses("user-a", "module_2a", {"supplements": "Magnesium"}, {})

    assert await repository.get_module_responses("user-a", "module_2a") == {"supplements": "Magnesium"}


async def test_all_responses_are_grouped_by_module(session):
    repository = ResponseRepositoryImpl(session)

    await repository.replace_module_responses("user-a", "module_4", {"doctor_questions": "Is HRT safe?"}, {})
    await repository.replace_module_responses("user-a", "module_5", {"other_questions": "Sleep tips"}, {})
    await repository.replace_module_responses("user-b", "module_4", {"doctor_questions": "Other user"}, {})

    assert await repository.get_all_responses("user-a") == {
        "module_4": {"doctor_questions": "Is HRT safe?"},
        "module_5": {"other_questions": "Sleep tips"},
    }


async def test_completing_a_module_twice_keeps_one_progress_row(session):
    repository = ResponseRepositoryImpl(session)

    await repository.mark_module_completed("user-a", "module_1")
    await repository.mark_module_completed("user-a", "module_1")

    progress = await repository.get_progress("user-a")
    assert [(row.module_name, row.completed) for row in progress] == [("module_1", True)]


async def test_upsert_updates_the_single_subscription(session):
    repository = SubscriptionRepositoryImpl(session)

    first = await repository.upsert("user-a", {
        "subscription_type": SubscriptionType.PENDING,
        "status": SubscriptionStatus.PENDING,
        "currency": "gbp",
    })
    second = await repository.upsert("user-a", {
        "subscription_type": SubscriptionType.PAID,
        "status": SubscriptionStatus.ACTIVE,
        "amount_paid": 19,
        "stripe_session_id": "cs_test_1",
    })

    assert second.id == first.id
    assert second.subscription_type == SubscriptionType.PAID
    assert second.amount_paid == 19
    assert second.currency == "gbp"


async def test_upsert_updates_row_inserted_by_concurrent_request(engine, session):
    async with async_sessionmaker(engine, expire_on_commit=False)() as other_session:
        await SubscriptionRepositoryImpl(other_session).create("user-a", {
            "subscription_type": SubscriptionType.PENDING,
            "status": SubscriptionStatus.PENDING,
            "currency": "gbp",
        })
        await other_session.commit()

    repository = StaleReadSubscriptionRepository(session)
    subscription = await repository.upsert("user-a", {
        "subscription_type": SubscriptionType.PAID,
        "status": SubscriptionStatus.ACTIVE,
        "stripe_session_id": "cs_test_2",
    })

    assert repository.missed_reads == 0
    assert subscription.subscription_type == SubscriptionType.PAID
    assert subscription.stripe_session_id == "cs_test_2"
    assert subscription.currency == "gbp"
    assert (await repository.get_by_user_id("user-a")).id == subscription.id


async def test_second_insert_for_user_conflicts(session):
    repository = SubscriptionRepositoryImpl(session)
    await repository.create("user-a", {"subscription_type": SubscriptionType.FREE, "status": SubscriptionStatus.ACTIVE})

    with pytest.raises(ConflictError):
        await repository.create("user-a", {"subscription_type": SubscriptionType.FREE})


async def test_welcome_flag_needs_a_subscription(session):
    repository = SubscriptionRepositoryImpl(session)

    assert await repository.mark_welcome_email_sent("user-a") is False

    await repository.upsert("user-a", {"status": SubscriptionStatus.ACTIVE})
    assert await repository.mark_welcome_email_sent("user-a") is True
    assert (await repository.get_by_user_id("user-a")).welcome_email_sent is True


async def test_webhook_event_is_recorded_once(session):
    repository = WebhookEventRepositoryImpl(session)

    assert await repository.exists("evt_1") is False
    await repository.record("evt_1", "checkout.session.completed")
    assert await repository.exists("evt_1") is True

    with pytest.raises(ConflictError):
        await repository.record("evt_1", "checkout.session.completed")


def test_expired_subscription_does_not_grant_access():
    now = datetime(2025, 7, 1, tzinfo=timezone.utc)
    subscription = Subscription(
        id="sub-1",
        user_id="user-a",
        subscription_type=SubscriptionType.PAID,
        status=SubscriptionStatus.ACTIVE,
        expires_at=now - timedelta(days=1),
    )

    assert subscription.is_expired(now)
    assert not subscription.grants_access(now)
    assert subscription.model_copy(update={"expires_at": None}).grants_access(now)


def test_naive_expiry_is_read_as_utc():
    subscription = Subscription(
        id="sub-1",
        user_id="user-a",
        status=SubscriptionStatus.ACTIVE,
        expires_at=datetime(2099, 1, 1),
    )

    assert subscription.grants_access()
