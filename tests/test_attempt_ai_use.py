from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

from fakes import FakeAccountsPort, make_subscription
from vendeai.application.use_cases.attempt_ai_use import AttemptAiUseUseCase


def test_free_user_gets_twenty_uses_then_denial():
    accounts = FakeAccountsPort()
    use_case = AttemptAiUseUseCase(subscriptions_port=accounts)

    decisions = [use_case.execute(user_id="user-1") for _ in range(21)]

    assert all(decision.allowed for decision in decisions[:20])
    assert decisions[19].remaining_ai_uses == 0
    denied = decisions[20]
    assert denied.allowed is False
    assert denied.upgrade_required is True
    assert denied.plan_code == "free"
    assert denied.remaining_ai_uses == 0
    assert accounts.subscriptions["user-1"].ai_uses_count == 20


def test_pro_user_remaining_counts_down():
    accounts = FakeAccountsPort()
    accounts.subscriptions["user-1"] = make_subscription(plan_code="pro", ai_uses_count=149)
    use_case = AttemptAiUseUseCase(subscriptions_port=accounts)

    granted = use_case.execute(user_id="user-1")
    denied = use_case.execute(user_id="user-1")

    assert granted.allowed is True
    assert granted.remaining_ai_uses == 0
    assert denied.allowed is False
    assert accounts.subscriptions["user-1"].ai_uses_count == 150


def test_premium_user_is_never_denied():
    accounts = FakeAccountsPort()
    accounts.subscriptions["user-1"] = make_subscription(plan_code="premium", ai_uses_count=10_000)

    decision = AttemptAiUseUseCase(subscriptions_port=accounts).execute(user_id="user-1")

    assert decision.allowed is True
    assert decision.remaining_ai_uses == "unlimited"
    assert accounts.subscriptions["user-1"].ai_uses_count == 10_001


def test_lapsed_paid_subscription_is_held_to_free_quota():
    accounts = FakeAccountsPort()
    accounts.subscriptions["user-1"] = make_subscription(
        plan_code="pro",
        status="canceled",
        current_period_end=datetime.now(timezone.utc) - timedelta(days=1),
        ai_uses_count=20,
    )

    decision = AttemptAiUseUseCase(subscriptions_port=accounts).execute(user_id="user-1")

    assert decision.allowed is False
    assert decision.plan_code == "free"


def test_concurrent_attempts_never_exceed_quota():
    accounts = FakeAccountsPort()
    accounts.subscriptions["user-1"] = make_subscription(plan_code="free", ai_uses_count=5)
    use_case = AttemptAiUseUseCase(subscriptions_port=accounts)
    results: list[bool] = []
    results_lock = threading.Lock()
    start = threading.Barrier(16)

    def worker():
        start.wait()
        decision = use_case.execute(user_id="user-1")
        with results_lock:
            results.append(decision.allowed)

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 15
    assert results.count(False) == 1
    assert accounts.subscriptions["user-1"].ai_uses_count == 20
