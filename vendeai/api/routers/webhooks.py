from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from vendeai.api.deps import (
    get_process_mercadopago_webhook_use_case,
    get_process_stripe_webhook_use_case,
)
from vendeai.api.schemas.billing import WebhookResponse
from vendeai.application.dto.billing import MercadoPagoWebhookInput, StripeWebhookInput
from vendeai.application.use_cases.process_mercadopago_webhook import ProcessMercadoPagoWebhookUseCase
from vendeai.application.use_cases.process_stripe_webhook import ProcessStripeWebhookUseCase
from vendeai.domain.exceptions import DomainError, WebhookSignatureError


logger = logging.getLogger(__name__)

router = APIRouter()

# After the signature is accepted the provider always gets a 200; a non-2xx
# would only make it resend the same notification. Use cases block on SQL and
# provider calls, so they run in the threadpool.


@router.post("/v1/webhooks/stripe", response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(..., alias="Stripe-Signature"),
    use_case: ProcessStripeWebhookUseCase = Depends(get_process_stripe_webhook_use_case),
):
    payload = await request.body()
    try:
        output = await run_in_threadpool(
            use_case.execute,
            StripeWebhookInput(signature=stripe_signature, payload=payload),
        )
    except WebhookSignatureError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except DomainError as exc:
        logger.error("webhooks: stripe_processing_failed error=%s", exc)
        return WebhookResponse(handled=False)
    return WebhookResponse(handled=output.handled)


@router.post("/v1/webhooks/mercadopago", response_model=WebhookResponse)
async def mercadopago_webhook(
    request: Request,
    x_signature: str | None = Header(default=None),
    x_request_id: str | None = Header(default=None),
    use_case: ProcessMercadoPagoWebhookUseCase = Depends(get_process_mercadopago_webhook_use_case),
):
    raw = await request.body()
    try:
        payload = json.loads(raw) if raw else {}
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid JSON payload.") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON payload.")

    try:
        output = await run_in_threadpool(
            use_case.execute,
            MercadoPagoWebhookInput(signature=x_signature, request_id=x_request_id, payload=payload),
        )
    except WebhookSignatureError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except DomainError as exc:
        logger.error("webhooks: mercadopago_processing_failed error=%s", exc)
        return WebhookResponse(handled=False)
    return WebhookResponse(handled=output.handled)
