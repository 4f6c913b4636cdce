from __future__ import annotations

import logging

from vendeai.application.dto.billing import MercadoPagoWebhookInput, WebhookOutput
from vendeai.application.ports.mercadopago_port import MercadoPagoPort
from vendeai.application.use_cases.apply_confirmed_payment import ApplyConfirmedPaymentUseCase
from vendeai.domain.entities.payment import AsyncPayment
from vendeai.domain.exceptions import InvalidReferenceError
from vendeai.domain.services.payment_reference import decode_external_reference


logger = logging.getLogger(__name__)

PAYMENT_EVENT = "payment"
APPROVED_STATUS = "approved"


class ProcessMercadoPagoWebhookUseCase:
    """Apply approved PIX payments notified by Mercado Pago.

    The notification only triggers the work: status and external reference are
    read back from the provider before anything is written.
    """

    def __init__(
        self,
        *,
        mercadopago_port: MercadoPagoPort,
        apply_confirmed_payment_use_case: ApplyConfirmedPaymentUseCase,
    ):
        self._mercadopago_port = mercadopago_port
        self._apply_confirmed_payment_use_case = apply_confirmed_payment_use_case

    def execute(self, command: MercadoPagoWebhookInput) -> WebhookOutput:
        event = self._mercadopago_port.verify_webhook(
            signature=command.signature,
            request_id=command.request_id,
            payload=command.payload,
        )

        # A notification without a status is still checked against the provider.
        if event.event_type != PAYMENT_EVENT or event.status not in (None, APPROVED_STATUS):
            logger.debug(
                "webhook: mercadopago_event_ignored type=%s status=%s",
                event.event_type,
                event.status,
            )
            return WebhookOutput(event_type=event.event_type, handled=False)

        if not event.payment_id:
            raise InvalidReferenceError("Mercado Pago event missing payment id.")

        payment = self._mercadopago_port.get_payment(payment_id=event.payment_id)
        if payment.status != APPROVED_STATUS:
            logger.info(
                "webhook: mercadopago_status_mismatch payment_id=%s status=%s",
                payment.payment_id,
                payment.status,
            )
            return WebhookOutput(event_type=event.event_type, handled=False)

        reference = decode_external_reference(payment.external_reference)
        self._apply_confirmed_payment_use_case.execute(
            user_id=reference.user_id,
            plan_code=reference.plan_code,
            rail=AsyncPayment(payment_id=payment.payment_id),
        )
        logger.info(
            "webhook: mercadopago_payment_applied payment_id=%s user_id=%s plan=%s",
            payment.payment_id,
            reference.user_id,
            reference.plan_code,
        )
        return WebhookOutput(event_type=event.event_type, handled=True)
