from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


SubscriptionStatus = Literal["active", "canceled"]

SUBSCRIPTION_PERIOD_DAYS = 30


@dataclass(frozen=True)
class Subscription:
    id: str
    user_id: str
    plan_code: str
    status: SubscriptionStatus
    current_period_start: datetime | None
    current_period_end: datetime | None
    canceled_at: datetime | None
    card_payment_ref: str | None
    async_payment_ref: str | None
    ai_uses_count: int
    created_at: datetime
    updated_at: datetime


def is_subscription_active(status: str) -> bool:
    return status == "active"
