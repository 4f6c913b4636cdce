from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from fakes import FakeAccountsPort, FakeMercadoPagoPort, FakeStripePort, make_subscription, make_user
from vendeai.application.dto.billing import (
    ConfirmAsyncPaymentInput,
    ConfirmCardPaymentInput,
    CreateAsyncPaymentInput,
    CreateCardIntentInput,
)
from vendeai.application.use_cases.apply_confirmed_payment import ApplyConfirmedPaymentUseCase
from vendeai.application.use_cases.cancel_subscription import CancelSubscriptionUseCase
from vendeai.application.use_cases.confirm_async_payment import ConfirmAsyncPaymentUseCase
from vendeai.application.use_cases.confirm_card_payment import ConfirmCardPaymentUseCase
from vendeai.application.use_cases.create_async_payment import CreateAsyncPaymentUseCase
from vendeai.application.use_cases.create_card_intent import CreateCardIntentUseCase
from vendeai.application.use_cases.get_async_payment_status import GetAsyncPaymentStatusUseCase
from vendeai.domain.entities.payment import AsyncPayment, CardPayment
from vendeai.domain.exceptions import (
    InvalidPlanError,
    InvalidReferenceError,
    PaymentExpiredError,
    PaymentNotSuccessfulError,
    PaymentOwnershipError,
    SubscriptionNotFoundError,
    UserNotFoundError,
)


def _card_flow(accounts: FakeAccountsPort, stripe: FakeStripePort):
    create = CreateCardIntentUseCase(stripe_port=stripe)
    confirm = ConfirmCardPaymentUseCase(
        stripe_port=stripe,
        apply_confirmed_payment_use_case=ApplyConfirmedPaymentUseCase(subscriptions_port=accounts),
    )
    return create, confirm


def _pix_flow(accounts: FakeAccountsPort, mercadopago: FakeMercadoPagoPort):
    create = CreateAsyncPaymentUseCase(auth_port=accounts, mercadopago_port=mercadopago)
    confirm = ConfirmAsyncPaymentUseCase(
        mercadopago_port=mercadopago,
        apply_confirmed_payment_use_case=ApplyConfirmedPaymentUseCase(subscriptions_port=accounts),
    )
    return create, confirm


def test_create_card_intent_prices_plan_in_cents():
    stripe = FakeStripePort()
    create, _ = _card_flow(FakeAccountsPort(), stripe)

    output = create.execute(CreateCardIntentInput(user_id="user-1", plan_code="premium", interval="year"))

    assert output.amount_cents == 49000
    assert output.currency == "brl"
    assert output.client_secret.startswith(output.payment_intent_id)
    assert stripe.created == [
        {"user_id": "user-1", "plan_code": "premium", "amount_cents": 49000, "currency": "brl"}
    ]


def test_create_card_intent_rejects_free_plan():
    stripe = FakeStripePort()
    create, _ = _card_flow(FakeAccountsPort(), stripe)

    with pytest.raises(InvalidPlanError):
        create.execute(CreateCardIntentInput(user_id="user-1", plan_code="free"))

    assert stripe.created == []


def test_confirm_card_payment_upgrades_free_user_and_resets_counter():
    accounts = FakeAccountsPort()
    accounts.subscriptions["user-1"] = make_subscription(plan_code="free", ai_uses_count=20)
    stripe = FakeStripePort()
    create, confirm = _card_flow(accounts, stripe)
    intent = create.execute(CreateCardIntentInput(user_id="user-1", plan_code="pro"))
    stripe.succeed(intent.payment_intent_id)

    output = confirm.execute(ConfirmCardPaymentInput(payment_intent_id=intent.payment_intent_id, user_id="user-1"))

    assert output.applied is True
    subscription = output.subscription
    assert subscription.plan_code == "pro"
    assert subscription.status == "active"
    assert subscription.ai_uses_count == 0
    assert subscription.card_payment_ref == intent.payment_intent_id
    assert subscription.async_payment_ref is None
    assert subscription.current_period_end - subscription.current_period_start == timedelta(days=30)


def test_confirm_card_payment_twice_is_idempotent():
    accounts = FakeAccountsPort()
    stripe = FakeStripePort()
    create, confirm = _card_flow(accounts, stripe)
    intent = create.execute(CreateCardIntentInput(user_id="user-1", plan_code="pro"))
    stripe.succeed(intent.payment_intent_id)
    command = ConfirmCardPaymentInput(payment_intent_id=intent.payment_intent_id, user_id="user-1")

    first = confirm.execute(command)
    second = confirm.execute(ConfirmCardPaymentInput(payment_intent_id=intent.payment_intent_id, user_id=None))

    assert first.applied is True
    assert second.applied is False
    assert second.subscription == first.subscription
    assert len(accounts.subscriptions) == 1


def test_confirm_card_payment_requires_succeeded_intent():
    accounts = FakeAccountsPort()
    stripe = FakeStripePort()
    create, confirm = _card_flow(accounts, stripe)
    intent = create.execute(CreateCardIntentInput(user_id="user-1", plan_code="pro"))

    with pytest.raises(PaymentNotSuccessfulError):
        confirm.execute(ConfirmCardPaymentInput(payment_intent_id=intent.payment_intent_id, user_id="user-1"))

    assert accounts.subscriptions == {}


def test_confirm_card_payment_rejects_foreign_intent():
    accounts = FakeAccountsPort()
    stripe = FakeStripePort()
    create, confirm = _card_flow(accounts, stripe)
    intent = create.execute(CreateCardIntentInput(user_id="user-1", plan_code="pro"))
    stripe.succeed(intent.payment_intent_id)

    with pytest.raises(PaymentOwnershipError):
        confirm.execute(ConfirmCardPaymentInput(payment_intent_id=intent.payment_intent_id, user_id="user-2"))


def test_confirm_card_payment_rejects_blank_reference():
    _, confirm = _card_flow(FakeAccountsPort(), FakeStripePort())

    with pytest.raises(InvalidReferenceError):
        confirm.execute(ConfirmCardPaymentInput(payment_intent_id="  ", user_id="user-1"))


def test_same_plan_renewal_keeps_ai_counter():
    accounts = FakeAccountsPort()
    accounts.subscriptions["user-1"] = make_subscription(
        plan_code="pro",
        current_period_end=datetime.now(timezone.utc) + timedelta(days=10),
        card_payment_ref="pi_old",
        ai_uses_count=42,
    )
    apply = ApplyConfirmedPaymentUseCase(subscriptions_port=accounts)

    output = apply.execute(user_id="user-1", plan_code="pro", rail=AsyncPayment(payment_id="777"))

    assert output.applied is True
    assert output.subscription.ai_uses_count == 42
    assert output.subscription.card_payment_ref is None
    assert output.subscription.async_payment_ref == "777"


def test_paying_again_after_lapse_resets_ai_counter():
    accounts = FakeAccountsPort()
    accounts.subscriptions["user-1"] = make_subscription(
        plan_code="pro",
        status="canceled",
        current_period_end=datetime.now(timezone.utc) - timedelta(days=1),
        canceled_at=datetime.now(timezone.utc) - timedelta(days=20),
        card_payment_ref="pi_old",
        ai_uses_count=150,
    )

    output = ApplyConfirmedPaymentUseCase(subscriptions_port=accounts).execute(
        user_id="user-1",
        plan_code="pro",
        rail=CardPayment(payment_intent_id="pi_new"),
    )

    assert output.applied is True
    assert output.subscription.status == "active"
    assert output.subscription.ai_uses_count == 0


def test_replay_of_older_payment_after_newer_one_is_ignored():
    accounts = FakeAccountsPort()
    apply = ApplyConfirmedPaymentUseCase(subscriptions_port=accounts)
    apply.execute(user_id="user-1", plan_code="pro", rail=CardPayment(payment_intent_id="pi_pro"))
    upgraded = apply.execute(user_id="user-1", plan_code="premium", rail=AsyncPayment(payment_id="mp_prem"))

    replay = apply.execute(user_id="user-1", plan_code="pro", rail=CardPayment(payment_intent_id="pi_pro"))

    assert replay.applied is False
    assert replay.subscription == upgraded.subscription
    assert accounts.subscriptions["user-1"].plan_code == "premium"


def test_apply_confirmed_payment_reactivates_canceled_subscription():
    accounts = FakeAccountsPort()
    accounts.subscriptions["user-1"] = make_subscription(
        plan_code="pro",
        status="canceled",
        canceled_at=datetime.now(timezone.utc),
        card_payment_ref="pi_old",
    )

    output = ApplyConfirmedPaymentUseCase(subscriptions_port=accounts).execute(
        user_id="user-1",
        plan_code="premium",
        rail=CardPayment(payment_intent_id="pi_new"),
    )

    assert output.subscription.status == "active"
    assert output.subscription.canceled_at is None
    assert output.subscription.plan_code == "premium"


def test_create_pix_payment_embeds_user_and_plan_in_reference():
    accounts = FakeAccountsPort()
    accounts.users["user-1"] = make_user("user-1")
    mercadopago = FakeMercadoPagoPort()
    create, _ = _pix_flow(accounts, mercadopago)

    output = create.execute(CreateAsyncPaymentInput(user_id="user-1", plan_code="pro"))

    assert output.amount == Decimal("29.00")
    assert output.external_reference.startswith("user-1_pro_")
    assert output.qr_code == "000201pix"
    (created,) = mercadopago.created
    assert created["description"] == "Plano Pro - VendeAi"
    assert created["payer_email"] == "alice@example.com"


def test_create_pix_payment_requires_known_user():
    create, _ = _pix_flow(FakeAccountsPort(), FakeMercadoPagoPort())

    with pytest.raises(UserNotFoundError):
        create.execute(CreateAsyncPaymentInput(user_id="ghost", plan_code="pro"))


def test_confirm_pix_payment_applies_when_approved():
    accounts = FakeAccountsPort()
    accounts.users["user-1"] = make_user("user-1")
    mercadopago = FakeMercadoPagoPort()
    create, confirm = _pix_flow(accounts, mercadopago)
    payment = create.execute(CreateAsyncPaymentInput(user_id="user-1", plan_code="premium"))

    with pytest.raises(PaymentNotSuccessfulError):
        confirm.execute(ConfirmAsyncPaymentInput(payment_id=payment.payment_id, user_id="user-1"))

    mercadopago.set_status(payment.payment_id, "approved")
    output = confirm.execute(ConfirmAsyncPaymentInput(payment_id=payment.payment_id, user_id="user-1"))

    assert output.subscription.plan_code == "premium"
    assert output.subscription.async_payment_ref == payment.payment_id


def test_confirm_pix_payment_after_expiry_fails_with_expired():
    accounts = FakeAccountsPort()
    accounts.users["user-1"] = make_user("user-1")
    mercadopago = FakeMercadoPagoPort()
    create, confirm = _pix_flow(accounts, mercadopago)
    payment = create.execute(CreateAsyncPaymentInput(user_id="user-1", plan_code="pro"))
    mercadopago.set_status(
        payment.payment_id,
        "pending",
        expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
    )

    with pytest.raises(PaymentExpiredError):
        confirm.execute(ConfirmAsyncPaymentInput(payment_id=payment.payment_id, user_id="user-1"))

    assert accounts.subscriptions == {}


def test_pix_status_is_private_to_payer():
    accounts = FakeAccountsPort()
    accounts.users["user-1"] = make_user("user-1")
    mercadopago = FakeMercadoPagoPort()
    create, _ = _pix_flow(accounts, mercadopago)
    payment = create.execute(CreateAsyncPaymentInput(user_id="user-1", plan_code="pro"))
    status_use_case = GetAsyncPaymentStatusUseCase(mercadopago_port=mercadopago)

    assert status_use_case.execute(payment_id=payment.payment_id, user_id="user-1").status == "pending"
    with pytest.raises(PaymentOwnershipError):
        status_use_case.execute(payment_id=payment.payment_id, user_id="user-2")


def test_cancel_subscription_without_record_mutates_nothing():
    accounts = FakeAccountsPort()
    stripe = FakeStripePort()

    with pytest.raises(SubscriptionNotFoundError):
        CancelSubscriptionUseCase(subscriptions_port=accounts, stripe_port=stripe).execute(user_id="user-1")

    assert accounts.subscriptions == {}
    assert stripe.canceled == []


def test_cancel_subscription_keeps_plan_and_tolerates_provider_failure():
    accounts = FakeAccountsPort()
    accounts.subscriptions["user-1"] = make_subscription(plan_code="pro", card_payment_ref="pi_1")
    stripe = FakeStripePort()
    stripe.fail_cancel = True

    canceled = CancelSubscriptionUseCase(subscriptions_port=accounts, stripe_port=stripe).execute(user_id="user-1")

    assert canceled.status == "canceled"
    assert canceled.plan_code == "pro"
    assert canceled.canceled_at is not None
