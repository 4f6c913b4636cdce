from __future__ import annotations

import logging

from vendeai.application.dto.billing import ConfirmCardPaymentInput, StripeWebhookInput, WebhookOutput
from vendeai.application.ports.stripe_port import StripePort
from vendeai.application.use_cases.confirm_card_payment import ConfirmCardPaymentUseCase
from vendeai.domain.exceptions import InvalidReferenceError


logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED_EVENT = "payment_intent.succeeded"


class ProcessStripeWebhookUseCase:
    def __init__(
        self,
        *,
        stripe_port: StripePort,
        confirm_card_payment_use_case: ConfirmCardPaymentUseCase,
    ):
        self._stripe_port = stripe_port
        self._confirm_card_payment_use_case = confirm_card_payment_use_case

    def execute(self, command: StripeWebhookInput) -> WebhookOutput:
        event = self._stripe_port.verify_webhook(signature=command.signature, payload=command.payload)

        if event.event_type != PAYMENT_SUCCEEDED_EVENT:
            logger.debug("webhook: stripe_event_ignored event_id=%s type=%s", event.event_id, event.event_type)
            return WebhookOutput(event_type=event.event_type, handled=False)

        if not event.payment_intent_id:
            raise InvalidReferenceError("Stripe event missing payment intent id.")

        self._confirm_card_payment_use_case.execute(
            ConfirmCardPaymentInput(payment_intent_id=event.payment_intent_id, user_id=None)
        )
        logger.info(
            "webhook: stripe_payment_applied event_id=%s intent_id=%s",
            event.event_id,
            event.payment_intent_id,
        )
        return WebhookOutput(event_type=event.event_type, handled=True)
