from __future__ import annotations

from typing import Protocol

from vendeai.application.dto.billing import StripePaymentIntentResult, StripeWebhookEvent
from vendeai.domain.entities.payment import CardPaymentSnapshot


class StripePort(Protocol):
    def create_payment_intent(
        self,
        *,
        user_id: str,
        plan_code: str,
        amount_cents: int,
        currency: str,
    ) -> StripePaymentIntentResult:
        ...

    def retrieve_payment_intent(self, *, payment_intent_id: str) -> CardPaymentSnapshot:
        ...

    def cancel_payment_intent(self, *, payment_intent_id: str) -> None:
        ...

    def verify_webhook(self, *, signature: str, payload: bytes) -> StripeWebhookEvent:
        ...
