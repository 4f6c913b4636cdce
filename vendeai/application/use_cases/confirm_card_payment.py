from __future__ import annotations

from vendeai.application.dto.billing import ApplyConfirmedPaymentOutput, ConfirmCardPaymentInput
from vendeai.application.ports.stripe_port import StripePort
from vendeai.application.use_cases.apply_confirmed_payment import ApplyConfirmedPaymentUseCase
from vendeai.domain.entities.payment import CardPayment
from vendeai.domain.exceptions import (
    InvalidReferenceError,
    PaymentNotSuccessfulError,
    PaymentOwnershipError,
)


class ConfirmCardPaymentUseCase:
    """Confirm a card intent and apply it.

    ``user_id`` is None when the call comes from the webhook; a user-initiated
    confirmation may only confirm that user's own intents.
    """

    def __init__(
        self,
        *,
        stripe_port: StripePort,
        apply_confirmed_payment_use_case: ApplyConfirmedPaymentUseCase,
    ):
        self._stripe_port = stripe_port
        self._apply_confirmed_payment_use_case = apply_confirmed_payment_use_case

    def execute(self, command: ConfirmCardPaymentInput) -> ApplyConfirmedPaymentOutput:
        payment_intent_id = (command.payment_intent_id or "").strip()
        if not payment_intent_id:
            raise InvalidReferenceError("payment_intent_id is required.")

        snapshot = self._stripe_port.retrieve_payment_intent(payment_intent_id=payment_intent_id)

        if not snapshot.user_id or not snapshot.plan_code:
            raise InvalidReferenceError("Payment intent is missing user or plan metadata.")
        if command.user_id is not None and snapshot.user_id != command.user_id:
            raise PaymentOwnershipError("Payment intent belongs to another user.")
        if snapshot.status != "succeeded":
            raise PaymentNotSuccessfulError(f"Payment not completed (status={snapshot.status}).")

        return self._apply_confirmed_payment_use_case.execute(
            user_id=snapshot.user_id,
            plan_code=snapshot.plan_code,
            rail=CardPayment(payment_intent_id=snapshot.payment_intent_id),
        )
