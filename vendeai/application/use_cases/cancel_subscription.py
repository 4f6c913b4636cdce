from __future__ import annotations

import logging

from vendeai.application.ports.stripe_port import StripePort
from vendeai.application.ports.subscriptions_port import SubscriptionsPort
from vendeai.domain.entities.subscription import Subscription
from vendeai.domain.exceptions import SubscriptionNotFoundError, UpstreamProviderError

from .auth_common import utcnow


logger = logging.getLogger(__name__)


class CancelSubscriptionUseCase:
    def __init__(self, *, subscriptions_port: SubscriptionsPort, stripe_port: StripePort):
        self._subscriptions_port = subscriptions_port
        self._stripe_port = stripe_port

    def execute(self, *, user_id: str) -> Subscription:
        subscription = self._subscriptions_port.get_subscription_for_user(user_id=user_id)
        if subscription is None:
            raise SubscriptionNotFoundError("Subscription not found.")

        if subscription.card_payment_ref:
            try:
                self._stripe_port.cancel_payment_intent(payment_intent_id=subscription.card_payment_ref)
            except UpstreamProviderError as exc:
                logger.warning(
                    "billing: card_intent_cancel_failed user_id=%s intent_id=%s error=%s",
                    user_id,
                    subscription.card_payment_ref,
                    exc,
                )

        canceled = self._subscriptions_port.cancel_subscription(user_id=user_id, canceled_at=utcnow())
        if canceled is None:
            raise SubscriptionNotFoundError("Subscription not found.")
        logger.info("billing: subscription_canceled user_id=%s plan=%s", user_id, canceled.plan_code)
        return canceled
