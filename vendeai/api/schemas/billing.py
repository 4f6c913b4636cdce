from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field


BillingInterval = Literal["month", "year"]


class CreateCardIntentRequest(BaseModel):
    plan_code: str = Field(..., min_length=1, max_length=32)
    interval: BillingInterval = "month"


class CreateCardIntentResponse(BaseModel):
    payment_intent_id: str
    client_secret: str
    amount_cents: int
    currency: str


class ConfirmCardPaymentRequest(BaseModel):
    payment_intent_id: str = Field(..., min_length=1)


class SubscriptionResponse(BaseModel):
    plan_code: str
    status: str
    current_period_start: datetime | None
    current_period_end: datetime | None
    canceled_at: datetime | None
    ai_uses: int


class ConfirmPaymentResponse(BaseModel):
    subscription: SubscriptionResponse
    applied: bool


class CreatePixPaymentRequest(BaseModel):
    plan_code: str = Field(..., min_length=1, max_length=32)
    interval: BillingInterval = "month"


class CreatePixPaymentResponse(BaseModel):
    payment_id: str
    status: str
    qr_code: str | None
    qr_code_base64: str | None
    external_reference: str
    amount: Decimal
    expires_at: datetime | None


class PixPaymentStatusResponse(BaseModel):
    payment_id: str
    status: str
    status_detail: str | None
    approved_at: datetime | None
    expires_at: datetime | None


class SubscriptionStatusResponse(BaseModel):
    subscription: SubscriptionResponse | None


class WebhookResponse(BaseModel):
    received: bool = True
    handled: bool
