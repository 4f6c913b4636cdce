from __future__ import annotations

from vendeai.application.dto.entitlements import UserEntitlementsOutput
from vendeai.application.ports.subscriptions_port import SubscriptionsPort
from vendeai.domain.entities.entitlements import Entitlement
from vendeai.domain.services.entitlements import build_user_entitlement

from .auth_common import utcnow


class GetUserEntitlementsUseCase:
    def __init__(self, *, subscriptions_port: SubscriptionsPort):
        self._subscriptions_port = subscriptions_port

    def resolve(self, *, user_id: str) -> Entitlement:
        subscription = self._subscriptions_port.get_subscription_for_user(user_id=user_id)
        return build_user_entitlement(user_id=user_id, subscription=subscription, now=utcnow())

    def execute(self, *, user_id: str) -> UserEntitlementsOutput:
        return to_entitlements_output(self.resolve(user_id=user_id))


def to_entitlements_output(entitlement: Entitlement) -> UserEntitlementsOutput:
    return UserEntitlementsOutput(
        user_id=entitlement.user_id,
        plan_code=entitlement.plan.id,
        status=entitlement.status,
        ai_uses=entitlement.ai_uses,
        remaining_ai_uses=entitlement.remaining_ai_uses,
        capabilities=sorted(entitlement.plan.capabilities),
        limits=dict(entitlement.plan.limits),
    )
