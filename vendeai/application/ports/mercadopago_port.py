from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from vendeai.application.dto.billing import MercadoPagoPixResult, MercadoPagoWebhookEvent
from vendeai.domain.entities.payment import AsyncPaymentSnapshot


class MercadoPagoPort(Protocol):
    def create_pix_payment(
        self,
        *,
        amount: Decimal,
        description: str,
        external_reference: str,
        payer_email: str,
        payer_name: str,
    ) -> MercadoPagoPixResult:
        ...

    def get_payment(self, *, payment_id: str) -> AsyncPaymentSnapshot:
        ...

    def verify_webhook(
        self,
        *,
        signature: str | None,
        request_id: str | None,
        payload: dict,
    ) -> MercadoPagoWebhookEvent:
        ...
