from __future__ import annotations

import logging
from datetime import timedelta

from vendeai.application.dto.billing import ApplyConfirmedPaymentOutput
from vendeai.application.ports.subscriptions_port import SubscriptionsPort
from vendeai.domain.entities.payment import AsyncPayment, CardPayment, PaymentRail
from vendeai.domain.entities.subscription import SUBSCRIPTION_PERIOD_DAYS
from vendeai.domain.services.plan_catalog import require_purchasable_plan

from .auth_common import utcnow


logger = logging.getLogger(__name__)


class ApplyConfirmedPaymentUseCase:
    """The only write path from a confirmed payment to the subscription row.

    Both rails and both webhooks end here. Replaying a confirmation whose
    reference was already applied returns the row unchanged, even after newer
    payments.
    """

    def __init__(self, *, subscriptions_port: SubscriptionsPort):
        self._subscriptions_port = subscriptions_port

    def execute(self, *, user_id: str, plan_code: str, rail: PaymentRail) -> ApplyConfirmedPaymentOutput:
        plan = require_purchasable_plan(plan_code)
        now = utcnow()

        card_payment_ref = rail.payment_intent_id if isinstance(rail, CardPayment) else None
        async_payment_ref = rail.payment_id if isinstance(rail, AsyncPayment) else None

        subscription, applied = self._subscriptions_port.upsert_confirmed_payment(
            user_id=user_id,
            plan_code=plan.id,
            card_payment_ref=card_payment_ref,
            async_payment_ref=async_payment_ref,
            period_start=now,
            period_end=now + timedelta(days=SUBSCRIPTION_PERIOD_DAYS),
            now=now,
        )
        if applied:
            logger.info(
                "billing: payment_applied user_id=%s plan=%s rail=%s ref=%s",
                user_id,
                plan.id,
                rail.rail,
                rail.external_ref,
            )
        else:
            logger.info(
                "billing: payment_replay_ignored user_id=%s rail=%s ref=%s",
                user_id,
                rail.rail,
                rail.external_ref,
            )
        return ApplyConfirmedPaymentOutput(subscription=subscription, applied=applied)
