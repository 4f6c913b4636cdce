from __future__ import annotations

from vendeai.application.dto.billing import ApplyConfirmedPaymentOutput, ConfirmAsyncPaymentInput
from vendeai.application.ports.mercadopago_port import MercadoPagoPort
from vendeai.application.use_cases.apply_confirmed_payment import ApplyConfirmedPaymentUseCase
from vendeai.domain.entities.payment import AsyncPayment
from vendeai.domain.exceptions import (
    InvalidReferenceError,
    PaymentExpiredError,
    PaymentNotSuccessfulError,
    PaymentOwnershipError,
)
from vendeai.domain.services.payment_reference import decode_external_reference

from .auth_common import utcnow


APPROVED_STATUS = "approved"


class ConfirmAsyncPaymentUseCase:
    def __init__(
        self,
        *,
        mercadopago_port: MercadoPagoPort,
        apply_confirmed_payment_use_case: ApplyConfirmedPaymentUseCase,
    ):
        self._mercadopago_port = mercadopago_port
        self._apply_confirmed_payment_use_case = apply_confirmed_payment_use_case

    def execute(self, command: ConfirmAsyncPaymentInput) -> ApplyConfirmedPaymentOutput:
        payment_id = (command.payment_id or "").strip()
        if not payment_id:
            raise InvalidReferenceError("payment_id is required.")

        snapshot = self._mercadopago_port.get_payment(payment_id=payment_id)
        reference = decode_external_reference(snapshot.external_reference)

        if command.user_id is not None and reference.user_id != command.user_id:
            raise PaymentOwnershipError("Payment belongs to another user.")

        if snapshot.status != APPROVED_STATUS:
            if snapshot.expires_at is not None and snapshot.expires_at <= utcnow():
                raise PaymentExpiredError("Payment expired. Start a new payment.")
            raise PaymentNotSuccessfulError(f"Payment not completed (status={snapshot.status}).")

        return self._apply_confirmed_payment_use_case.execute(
            user_id=reference.user_id,
            plan_code=reference.plan_code,
            rail=AsyncPayment(payment_id=snapshot.payment_id),
        )
