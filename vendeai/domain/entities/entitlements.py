from __future__ import annotations

from dataclasses import dataclass

from vendeai.domain.entities.plan import AiQuota, Plan


@dataclass(frozen=True)
class Entitlement:
    user_id: str
    plan: Plan
    status: str
    ai_uses: int
    remaining_ai_uses: AiQuota

    @property
    def can_use_ai(self) -> bool:
        return self.remaining_ai_uses == "unlimited" or self.remaining_ai_uses > 0
