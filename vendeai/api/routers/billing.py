from __future__ import annotations

from fastapi import APIRouter, Depends

from vendeai.api.deps import (
    get_cancel_subscription_use_case,
    get_confirm_async_payment_use_case,
    get_confirm_card_payment_use_case,
    get_create_async_payment_use_case,
    get_create_card_intent_use_case,
    get_current_user,
    get_get_async_payment_status_use_case,
    get_get_subscription_status_use_case,
)
from vendeai.api.errors import to_http_exception
from vendeai.api.schemas.billing import (
    ConfirmCardPaymentRequest,
    ConfirmPaymentResponse,
    CreateCardIntentRequest,
    CreateCardIntentResponse,
    CreatePixPaymentRequest,
    CreatePixPaymentResponse,
    PixPaymentStatusResponse,
    SubscriptionResponse,
    SubscriptionStatusResponse,
)
from vendeai.application.dto.billing import (
    ConfirmAsyncPaymentInput,
    ConfirmCardPaymentInput,
    CreateAsyncPaymentInput,
    CreateCardIntentInput,
)
from vendeai.application.use_cases.cancel_subscription import CancelSubscriptionUseCase
from vendeai.application.use_cases.confirm_async_payment import ConfirmAsyncPaymentUseCase
from vendeai.application.use_cases.confirm_card_payment import ConfirmCardPaymentUseCase
from vendeai.application.use_cases.create_async_payment import CreateAsyncPaymentUseCase
from vendeai.application.use_cases.create_card_intent import CreateCardIntentUseCase
from vendeai.application.use_cases.get_async_payment_status import GetAsyncPaymentStatusUseCase
from vendeai.application.use_cases.get_subscription_status import GetSubscriptionStatusUseCase
from vendeai.domain.entities.subscription import Subscription
from vendeai.domain.entities.user import User
from vendeai.domain.exceptions import DomainError


router = APIRouter()


def _subscription_response(subscription: Subscription) -> SubscriptionResponse:
    return SubscriptionResponse(
        plan_code=subscription.plan_code,
        status=subscription.status,
        current_period_start=subscription.current_period_start,
        current_period_end=subscription.current_period_end,
        canceled_at=subscription.canceled_at,
        ai_uses=subscription.ai_uses_count,
    )


@router.post("/v1/billing/card/intents", response_model=CreateCardIntentResponse)
def create_card_intent(
    req: CreateCardIntentRequest,
    current_user: User = Depends(get_current_user),
    use_case: CreateCardIntentUseCase = Depends(get_create_card_intent_use_case),
):
    try:
        output = use_case.execute(
            CreateCardIntentInput(user_id=current_user.id, plan_code=req.plan_code, interval=req.interval)
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return CreateCardIntentResponse(
        payment_intent_id=output.payment_intent_id,
        client_secret=output.client_secret,
        amount_cents=output.amount_cents,
        currency=output.currency,
    )


@router.post("/v1/billing/card/confirm", response_model=ConfirmPaymentResponse)
def confirm_card_payment(
    req: ConfirmCardPaymentRequest,
    current_user: User = Depends(get_current_user),
    use_case: ConfirmCardPaymentUseCase = Depends(get_confirm_card_payment_use_case),
):
    try:
        output = use_case.execute(
            ConfirmCardPaymentInput(payment_intent_id=req.payment_intent_id, user_id=current_user.id)
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return ConfirmPaymentResponse(subscription=_subscription_response(output.subscription), applied=output.applied)


@router.post("/v1/billing/pix", response_model=CreatePixPaymentResponse)
def create_pix_payment(
    req: CreatePixPaymentRequest,
    current_user: User = Depends(get_current_user),
    use_case: CreateAsyncPaymentUseCase = Depends(get_create_async_payment_use_case),
):
    try:
        output = use_case.execute(
            CreateAsyncPaymentInput(user_id=current_user.id, plan_code=req.plan_code, interval=req.interval)
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return CreatePixPaymentResponse(
        payment_id=output.payment_id,
        status=output.status,
        qr_code=output.qr_code,
        qr_code_base64=output.qr_code_base64,
        external_reference=output.external_reference,
        amount=output.amount,
        expires_at=output.expires_at,
    )


@router.get("/v1/billing/pix/{payment_id}", response_model=PixPaymentStatusResponse)
def get_pix_payment_status(
    payment_id: str,
    current_user: User = Depends(get_current_user),
    use_case: GetAsyncPaymentStatusUseCase = Depends(get_get_async_payment_status_use_case),
):
    try:
        output = use_case.execute(payment_id=payment_id, user_id=current_user.id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return PixPaymentStatusResponse(
        payment_id=output.payment_id,
        status=output.status,
        status_detail=output.status_detail,
        approved_at=output.approved_at,
        expires_at=output.expires_at,
    )


@router.post("/v1/billing/pix/{payment_id}/confirm", response_model=ConfirmPaymentResponse)
def confirm_pix_payment(
    payment_id: str,
    current_user: User = Depends(get_current_user),
    use_case: ConfirmAsyncPaymentUseCase = Depends(get_confirm_async_payment_use_case),
):
    try:
        output = use_case.execute(ConfirmAsyncPaymentInput(payment_id=payment_id, user_id=current_user.id))
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return ConfirmPaymentResponse(subscription=_subscription_response(output.subscription), applied=output.applied)


@router.get("/v1/billing/subscription", response_model=SubscriptionStatusResponse)
def get_subscription_status(
    current_user: User = Depends(get_current_user),
    use_case: GetSubscriptionStatusUseCase = Depends(get_get_subscription_status_use_case),
):
    subscription = use_case.execute(user_id=current_user.id)
    return SubscriptionStatusResponse(
        subscription=_subscription_response(subscription) if subscription is not None else None
    )


@router.post("/v1/billing/subscription/cancel", response_model=SubscriptionStatusResponse)
def cancel_subscription(
    current_user: User = Depends(get_current_user),
    use_case: CancelSubscriptionUseCase = Depends(get_cancel_subscription_use_case),
):
    try:
        subscription = use_case.execute(user_id=current_user.id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return SubscriptionStatusResponse(subscription=_subscription_response(subscription))
