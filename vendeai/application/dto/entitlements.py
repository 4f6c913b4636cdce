from __future__ import annotations

from dataclasses import dataclass

from vendeai.domain.entities.plan import AiQuota


@dataclass(frozen=True)
class PlanOutput:
    id: str
    name: str
    ai_quota: AiQuota
    capabilities: list[str]
    limits: dict[str, int | None]
    monthly_price_cents: int
    annual_price_cents: int | None


@dataclass(frozen=True)
class UserEntitlementsOutput:
    user_id: str
    plan_code: str
    status: str
    ai_uses: int
    remaining_ai_uses: AiQuota
    capabilities: list[str]
    limits: dict[str, int | None]


@dataclass(frozen=True)
class AiUseDecision:
    allowed: bool
    plan_code: str
    remaining_ai_uses: AiQuota

    @property
    def upgrade_required(self) -> bool:
        return not self.allowed
