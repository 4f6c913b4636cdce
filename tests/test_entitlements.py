from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fakes import FakeAccountsPort, make_subscription
from vendeai.application.use_cases.get_user_entitlements import GetUserEntitlementsUseCase
from vendeai.domain.entities.feature import AD_GENERATION, TREND_SUGGESTIONS
from vendeai.domain.services.entitlements import build_user_entitlement, effective_plan_code, has_capability


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_missing_subscription_resolves_to_free():
    entitlement = build_user_entitlement(user_id="user-1", subscription=None, now=NOW)

    assert entitlement.plan.id == "free"
    assert entitlement.ai_uses == 0
    assert entitlement.remaining_ai_uses == 20
    assert entitlement.can_use_ai


def test_remaining_uses_never_go_negative():
    subscription = make_subscription(plan_code="free", ai_uses_count=25)

    entitlement = build_user_entitlement(user_id="user-1", subscription=subscription, now=NOW)

    assert entitlement.remaining_ai_uses == 0
    assert not entitlement.can_use_ai


def test_premium_is_unlimited():
    subscription = make_subscription(plan_code="premium", ai_uses_count=5000)

    entitlement = build_user_entitlement(user_id="user-1", subscription=subscription, now=NOW)

    assert entitlement.remaining_ai_uses == "unlimited"
    assert entitlement.can_use_ai


def test_unknown_plan_code_resolves_to_free():
    subscription = make_subscription(plan_code="legacy-gold", ai_uses_count=3)

    entitlement = build_user_entitlement(user_id="user-1", subscription=subscription, now=NOW)

    assert entitlement.plan.id == "free"
    assert entitlement.remaining_ai_uses == 17


def test_canceled_subscription_keeps_plan_until_period_end():
    running = make_subscription(
        plan_code="pro",
        status="canceled",
        current_period_end=NOW + timedelta(days=3),
        canceled_at=NOW - timedelta(days=1),
    )
    lapsed = make_subscription(
        plan_code="pro",
        status="canceled",
        current_period_end=NOW - timedelta(seconds=1),
        canceled_at=NOW - timedelta(days=40),
    )

    assert effective_plan_code(running, now=NOW) == "pro"
    assert effective_plan_code(lapsed, now=NOW) == "free"


def test_has_capability_follows_plan():
    free = build_user_entitlement(user_id="user-1", subscription=None, now=NOW).plan
    pro = build_user_entitlement(
        user_id="user-1",
        subscription=make_subscription(plan_code="pro"),
        now=NOW,
    ).plan

    assert has_capability(free, TREND_SUGGESTIONS)
    assert not has_capability(free, AD_GENERATION)
    assert has_capability(pro, AD_GENERATION)


def test_get_user_entitlements_use_case_returns_sorted_capabilities():
    accounts = FakeAccountsPort()
    accounts.subscriptions["user-1"] = make_subscription(plan_code="pro", ai_uses_count=10)

    output = GetUserEntitlementsUseCase(subscriptions_port=accounts).execute(user_id="user-1")

    assert output.plan_code == "pro"
    assert output.ai_uses == 10
    assert output.remaining_ai_uses == 140
    assert output.capabilities == sorted(output.capabilities)
    assert output.limits == {"products": None}
