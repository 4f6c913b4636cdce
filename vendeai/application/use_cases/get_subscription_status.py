from __future__ import annotations

from vendeai.application.ports.subscriptions_port import SubscriptionsPort
from vendeai.domain.entities.subscription import Subscription


class GetSubscriptionStatusUseCase:
    def __init__(self, *, subscriptions_port: SubscriptionsPort):
        self._subscriptions_port = subscriptions_port

    def execute(self, *, user_id: str) -> Subscription | None:
        return self._subscriptions_port.get_subscription_for_user(user_id=user_id)
