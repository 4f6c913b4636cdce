from __future__ import annotations

from vendeai.application.dto.billing import AsyncPaymentStatusOutput
from vendeai.application.ports.mercadopago_port import MercadoPagoPort
from vendeai.domain.exceptions import PaymentOwnershipError
from vendeai.domain.services.payment_reference import decode_external_reference


class GetAsyncPaymentStatusUseCase:
    def __init__(self, *, mercadopago_port: MercadoPagoPort):
        self._mercadopago_port = mercadopago_port

    def execute(self, *, payment_id: str, user_id: str) -> AsyncPaymentStatusOutput:
        snapshot = self._mercadopago_port.get_payment(payment_id=payment_id)
        reference = decode_external_reference(snapshot.external_reference)
        if reference.user_id != user_id:
            raise PaymentOwnershipError("Payment belongs to another user.")
        return AsyncPaymentStatusOutput(
            payment_id=snapshot.payment_id,
            status=snapshot.status,
            status_detail=snapshot.status_detail,
            approved_at=snapshot.approved_at,
            expires_at=snapshot.expires_at,
        )
