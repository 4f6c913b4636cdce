from __future__ import annotations

import logging
import time

from vendeai.application.dto.billing import CreateAsyncPaymentInput, CreateAsyncPaymentOutput
from vendeai.application.ports.auth_port import AuthPort
from vendeai.application.ports.mercadopago_port import MercadoPagoPort
from vendeai.domain.exceptions import UserNotFoundError
from vendeai.domain.services.payment_reference import encode_external_reference
from vendeai.domain.services.plan_catalog import pix_price, require_purchasable_plan


logger = logging.getLogger(__name__)


class CreateAsyncPaymentUseCase:
    def __init__(self, *, auth_port: AuthPort, mercadopago_port: MercadoPagoPort):
        self._auth_port = auth_port
        self._mercadopago_port = mercadopago_port

    def execute(self, command: CreateAsyncPaymentInput) -> CreateAsyncPaymentOutput:
        plan = require_purchasable_plan(command.plan_code)
        amount = pix_price(plan.id, command.interval)

        user = self._auth_port.get_user_by_id(user_id=command.user_id)
        if user is None:
            raise UserNotFoundError("User not found.")

        external_reference = encode_external_reference(
            user_id=user.id,
            plan_code=plan.id,
            created_at_ms=int(time.time() * 1000),
        )
        result = self._mercadopago_port.create_pix_payment(
            amount=amount,
            description=f"Plano {plan.name} - VendeAi",
            external_reference=external_reference,
            payer_email=user.email,
            payer_name=user.name,
        )
        logger.info(
            "billing: pix_created user_id=%s plan=%s payment_id=%s",
            user.id,
            plan.id,
            result.payment_id,
        )
        return CreateAsyncPaymentOutput(
            payment_id=result.payment_id,
            status=result.status,
            qr_code=result.qr_code,
            qr_code_base64=result.qr_code_base64,
            external_reference=external_reference,
            amount=amount,
            expires_at=result.expires_at,
        )
