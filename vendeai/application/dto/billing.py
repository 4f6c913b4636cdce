from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from vendeai.domain.entities.subscription import Subscription


@dataclass(frozen=True)
class CreateCardIntentInput:
    user_id: str
    plan_code: str
    interval: str = "month"


@dataclass(frozen=True)
class CreateCardIntentOutput:
    payment_intent_id: str
    client_secret: str
    amount_cents: int
    currency: str


@dataclass(frozen=True)
class ConfirmCardPaymentInput:
    payment_intent_id: str
    user_id: str | None


@dataclass(frozen=True)
class CreateAsyncPaymentInput:
    user_id: str
    plan_code: str
    interval: str = "month"


@dataclass(frozen=True)
class CreateAsyncPaymentOutput:
    payment_id: str
    status: str
    qr_code: str | None
    qr_code_base64: str | None
    external_reference: str
    amount: Decimal
    expires_at: datetime | None


@dataclass(frozen=True)
class ConfirmAsyncPaymentInput:
    payment_id: str
    user_id: str | None


@dataclass(frozen=True)
class AsyncPaymentStatusOutput:
    payment_id: str
    status: str
    status_detail: str | None
    approved_at: datetime | None
    expires_at: datetime | None


@dataclass(frozen=True)
class ApplyConfirmedPaymentOutput:
    subscription: Subscription
    applied: bool


@dataclass(frozen=True)
class StripePaymentIntentResult:
    id: str
    client_secret: str
    amount_cents: int
    currency: str


@dataclass(frozen=True)
class MercadoPagoPixResult:
    payment_id: str
    status: str
    qr_code: str | None
    qr_code_base64: str | None
    expires_at: datetime | None


@dataclass(frozen=True)
class StripeWebhookInput:
    signature: str
    payload: bytes


@dataclass(frozen=True)
class StripeWebhookEvent:
    event_id: str
    event_type: str
    payment_intent_id: str | None


@dataclass(frozen=True)
class MercadoPagoWebhookInput:
    signature: str | None
    request_id: str | None
    payload: dict


@dataclass(frozen=True)
class MercadoPagoWebhookEvent:
    event_type: str
    payment_id: str | None
    status: str | None


@dataclass(frozen=True)
class WebhookOutput:
    event_type: str
    handled: bool
