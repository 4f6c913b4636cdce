from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from vendeai.domain.entities.plan import AiQuota


AiDenialReason = Literal["feature_locked", "quota_exhausted"]


@dataclass(frozen=True)
class AiCompletionRequest:
    model: str
    prompt: str
    response_schema: dict | None
    image_mime_type: str | None = None
    image_base64: str | None = None


@dataclass(frozen=True)
class RunAiActionInput:
    user_id: str
    action: str
    params: dict[str, Any]


@dataclass(frozen=True)
class RunAiActionOutput:
    action: str
    allowed: bool
    result: Any
    plan_code: str
    remaining_ai_uses: AiQuota
    denial_reason: AiDenialReason | None = None
