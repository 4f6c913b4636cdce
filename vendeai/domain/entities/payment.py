from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Union


PaymentRailName = Literal["card", "async"]


@dataclass(frozen=True)
class CardPayment:
    payment_intent_id: str

    @property
    def rail(self) -> PaymentRailName:
        return "card"

    @property
    def external_ref(self) -> str:
        return self.payment_intent_id


@dataclass(frozen=True)
class AsyncPayment:
    payment_id: str

    @property
    def rail(self) -> PaymentRailName:
        return "async"

    @property
    def external_ref(self) -> str:
        return self.payment_id


PaymentRail = Union[CardPayment, AsyncPayment]


@dataclass(frozen=True)
class ExternalReference:
    user_id: str
    plan_code: str
    created_at_ms: int


@dataclass(frozen=True)
class AsyncPaymentSnapshot:
    payment_id: str
    status: str
    status_detail: str | None
    external_reference: str | None
    expires_at: datetime | None
    approved_at: datetime | None


@dataclass(frozen=True)
class CardPaymentSnapshot:
    payment_intent_id: str
    status: str
    user_id: str | None
    plan_code: str | None
