from __future__ import annotations

import logging

from vendeai.application.dto.entitlements import AiUseDecision
from vendeai.application.ports.subscriptions_port import SubscriptionsPort
from vendeai.domain.entities.plan import UNLIMITED
from vendeai.domain.services.entitlements import build_user_entitlement, remaining_ai_uses
from vendeai.domain.services.plan_catalog import DEFAULT_PLAN_CODE

from .auth_common import utcnow


logger = logging.getLogger(__name__)

# A confirmed payment may swap the plan between the read and the increment.
_MAX_ATTEMPTS = 2


class AttemptAiUseUseCase:
    """Consume one AI use if the principal still has quota.

    The check and the increment are a single conditional update in storage, so
    concurrent requests can never push the counter past the quota.
    """

    def __init__(self, *, subscriptions_port: SubscriptionsPort):
        self._subscriptions_port = subscriptions_port

    def execute(self, *, user_id: str) -> AiUseDecision:
        now = utcnow()
        subscription = self._subscriptions_port.get_subscription_for_user(user_id=user_id)
        if subscription is None:
            subscription = self._subscriptions_port.ensure_subscription(
                user_id=user_id,
                plan_code=DEFAULT_PLAN_CODE,
                now=now,
            )

        for _ in range(_MAX_ATTEMPTS):
            entitlement = build_user_entitlement(user_id=user_id, subscription=subscription, now=now)
            plan = entitlement.plan
            quota = None if plan.ai_quota == UNLIMITED else int(plan.ai_quota)

            new_count = self._subscriptions_port.try_increment_ai_uses(
                user_id=user_id,
                plan_code=subscription.plan_code,
                quota=quota,
            )
            if new_count is not None:
                logger.info("quota: ai_use_granted user_id=%s plan=%s count=%s", user_id, plan.id, new_count)
                return AiUseDecision(
                    allowed=True,
                    plan_code=plan.id,
                    remaining_ai_uses=remaining_ai_uses(plan, new_count),
                )

            current = self._subscriptions_port.get_subscription_for_user(user_id=user_id)
            if current is None or current.plan_code == subscription.plan_code:
                logger.info("quota: ai_use_denied user_id=%s plan=%s", user_id, plan.id)
                denied = build_user_entitlement(user_id=user_id, subscription=current, now=now)
                return AiUseDecision(
                    allowed=False,
                    plan_code=denied.plan.id,
                    remaining_ai_uses=denied.remaining_ai_uses,
                )
            subscription = current

        logger.warning("quota: plan_changed_during_attempt user_id=%s", user_id)
        final = build_user_entitlement(user_id=user_id, subscription=subscription, now=now)
        return AiUseDecision(allowed=False, plan_code=final.plan.id, remaining_ai_uses=final.remaining_ai_uses)
