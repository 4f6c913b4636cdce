from __future__ import annotations

from datetime import datetime

from vendeai.domain.entities.entitlements import Entitlement
from vendeai.domain.entities.plan import UNLIMITED, Plan
from vendeai.domain.entities.subscription import Subscription, is_subscription_active
from vendeai.domain.services.plan_catalog import DEFAULT_PLAN_CODE, get_plan


def effective_plan_code(subscription: Subscription | None, *, now: datetime) -> str:
    """Plan the subscription currently grants.

    A canceled subscription keeps its plan until the paid period ends.
    """
    if subscription is None:
        return DEFAULT_PLAN_CODE
    if is_subscription_active(subscription.status):
        return subscription.plan_code
    if subscription.current_period_end is not None and subscription.current_period_end > now:
        return subscription.plan_code
    return DEFAULT_PLAN_CODE


def remaining_ai_uses(plan: Plan, ai_uses: int):
    if plan.ai_quota == UNLIMITED:
        return UNLIMITED
    return max(int(plan.ai_quota) - ai_uses, 0)


def build_user_entitlement(
    *,
    user_id: str,
    subscription: Subscription | None,
    now: datetime,
) -> Entitlement:
    plan = get_plan(effective_plan_code(subscription, now=now))
    ai_uses = subscription.ai_uses_count if subscription is not None else 0
    status = subscription.status if subscription is not None else "active"
    return Entitlement(
        user_id=user_id,
        plan=plan,
        status=status,
        ai_uses=ai_uses,
        remaining_ai_uses=remaining_ai_uses(plan, ai_uses),
    )


def has_capability(plan: Plan, feature_code: str) -> bool:
    return feature_code in plan.capabilities
