from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, Field


Quota = Union[int, Literal["unlimited"]]


class PlanResponse(BaseModel):
    id: str
    name: str
    ai_quota: Quota
    capabilities: list[str]
    limits: dict[str, int | None]
    monthly_price_cents: int
    annual_price_cents: int | None


class PlansResponse(BaseModel):
    plans: list[PlanResponse]


class EntitlementsResponse(BaseModel):
    plan_code: str
    status: str
    ai_uses: int
    remaining_ai_uses: Quota
    capabilities: list[str]
    limits: dict[str, int | None]


class AiUseResponse(BaseModel):
    allowed: bool
    plan_code: str
    remaining_ai_uses: Quota
    upgrade_required: bool
    message: str | None = None


class AiActionRequest(BaseModel):
    params: dict[str, Any] = Field(default_factory=dict)


class AiActionResponse(BaseModel):
    action: str
    allowed: bool
    result: Any = None
    plan_code: str
    remaining_ai_uses: Quota
    denial_reason: str | None = None
    message: str | None = None
