from __future__ import annotations

from datetime import datetime
from typing import Protocol

from vendeai.domain.entities.subscription import Subscription


class SubscriptionsPort(Protocol):
    def get_subscription_for_user(self, *, user_id: str) -> Subscription | None:
        ...

    def ensure_subscription(self, *, user_id: str, plan_code: str, now: datetime) -> Subscription:
        """Create the row if the user has none; never overwrites."""
        ...

    def upsert_confirmed_payment(
        self,
        *,
        user_id: str,
        plan_code: str,
        card_payment_ref: str | None,
        async_payment_ref: str | None,
        period_start: datetime,
        period_end: datetime,
        now: datetime,
    ) -> tuple[Subscription, bool]:
        """Atomic upsert keyed by user_id.

        Returns the stored row and whether it was written. A payment reference
        is applied at most once: replaying it, even after newer payments, leaves
        the row untouched. The AI counter is kept only when an active row of the
        same plan is still inside its paid period.
        """
        ...

    def try_increment_ai_uses(
        self,
        *,
        user_id: str,
        plan_code: str,
        quota: int | None,
    ) -> int | None:
        """Increment the counter only while it is below ``quota`` and the row
        still holds ``plan_code``. ``quota=None`` means unlimited. Returns the new
        count, or None when nothing was updated."""
        ...

    def cancel_subscription(self, *, user_id: str, canceled_at: datetime) -> Subscription | None:
        ...
