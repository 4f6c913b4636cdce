from __future__ import annotations

from vendeai.application.dto.entitlements import PlanOutput
from vendeai.domain.services.plan_catalog import CARD_PRICES_CENTS, list_plans


class ListPlansUseCase:
    def execute(self) -> list[PlanOutput]:
        outputs: list[PlanOutput] = []
        for plan in list_plans():
            prices = CARD_PRICES_CENTS.get(plan.id, {})
            outputs.append(
                PlanOutput(
                    id=plan.id,
                    name=plan.name,
                    ai_quota=plan.ai_quota,
                    capabilities=sorted(plan.capabilities),
                    limits=dict(plan.limits),
                    monthly_price_cents=prices.get("month", 0),
                    annual_price_cents=prices.get("year"),
                )
            )
        return outputs
