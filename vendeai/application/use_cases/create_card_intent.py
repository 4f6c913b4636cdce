from __future__ import annotations

import logging

from vendeai.application.dto.billing import CreateCardIntentInput, CreateCardIntentOutput
from vendeai.application.ports.stripe_port import StripePort
from vendeai.domain.services.plan_catalog import card_price_cents, require_purchasable_plan


logger = logging.getLogger(__name__)


class CreateCardIntentUseCase:
    def __init__(self, *, stripe_port: StripePort, currency: str = "brl"):
        self._stripe_port = stripe_port
        self._currency = currency

    def execute(self, command: CreateCardIntentInput) -> CreateCardIntentOutput:
        plan = require_purchasable_plan(command.plan_code)
        amount_cents = card_price_cents(plan.id, command.interval)

        result = self._stripe_port.create_payment_intent(
            user_id=command.user_id,
            plan_code=plan.id,
            amount_cents=amount_cents,
            currency=self._currency,
        )
        logger.info(
            "billing: card_intent_created user_id=%s plan=%s intent_id=%s",
            command.user_id,
            plan.id,
            result.id,
        )
        return CreateCardIntentOutput(
            payment_intent_id=result.id,
            client_secret=result.client_secret,
            amount_cents=result.amount_cents,
            currency=result.currency,
        )
