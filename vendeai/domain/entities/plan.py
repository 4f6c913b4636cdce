from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


UNLIMITED = "unlimited"

AiQuota = int | Literal["unlimited"]
BillingInterval = Literal["month", "year"]


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    sort_order: int
    ai_quota: AiQuota
    capabilities: frozenset[str]
    limits: dict[str, int | None]
    is_purchasable: bool

    @property
    def has_unlimited_ai(self) -> bool:
        return self.ai_quota == UNLIMITED
