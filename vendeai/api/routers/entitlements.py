from __future__ import annotations

from fastapi import APIRouter, Depends

from vendeai.api.deps import (
    get_attempt_ai_use_use_case,
    get_current_user,
    get_get_user_entitlements_use_case,
    get_list_plans_use_case,
    get_run_ai_action_use_case,
)
from vendeai.api.errors import to_http_exception
from vendeai.api.schemas.entitlements import (
    AiActionRequest,
    AiActionResponse,
    AiUseResponse,
    EntitlementsResponse,
    PlanResponse,
    PlansResponse,
)
from vendeai.application.dto.ai import RunAiActionInput
from vendeai.application.use_cases.attempt_ai_use import AttemptAiUseUseCase
from vendeai.application.use_cases.get_user_entitlements import GetUserEntitlementsUseCase
from vendeai.application.use_cases.list_plans import ListPlansUseCase
from vendeai.application.use_cases.run_ai_action import RunAiActionUseCase
from vendeai.domain.entities.user import User
from vendeai.domain.exceptions import DomainError


router = APIRouter()

UPGRADE_MESSAGE = "Upgrade your plan to continue using this feature."
QUOTA_MESSAGE = "You have used all AI uses of your plan. Upgrade your plan to continue."


@router.get("/v1/plans", response_model=PlansResponse)
def list_plans(use_case: ListPlansUseCase = Depends(get_list_plans_use_case)):
    return PlansResponse(
        plans=[
            PlanResponse(
                id=plan.id,
                name=plan.name,
                ai_quota=plan.ai_quota,
                capabilities=plan.capabilities,
                limits=plan.limits,
                monthly_price_cents=plan.monthly_price_cents,
                annual_price_cents=plan.annual_price_cents,
            )
            for plan in use_case.execute()
        ]
    )


@router.get("/v1/entitlements", response_model=EntitlementsResponse)
def get_entitlements(
    current_user: User = Depends(get_current_user),
    use_case: GetUserEntitlementsUseCase = Depends(get_get_user_entitlements_use_case),
):
    output = use_case.execute(user_id=current_user.id)
    return EntitlementsResponse(
        plan_code=output.plan_code,
        status=output.status,
        ai_uses=output.ai_uses,
        remaining_ai_uses=output.remaining_ai_uses,
        capabilities=output.capabilities,
        limits=output.limits,
    )


@router.post("/v1/ai/uses", response_model=AiUseResponse)
def attempt_ai_use(
    current_user: User = Depends(get_current_user),
    use_case: AttemptAiUseUseCase = Depends(get_attempt_ai_use_use_case),
):
    decision = use_case.execute(user_id=current_user.id)
    return AiUseResponse(
        allowed=decision.allowed,
        plan_code=decision.plan_code,
        remaining_ai_uses=decision.remaining_ai_uses,
        upgrade_required=decision.upgrade_required,
        message=None if decision.allowed else QUOTA_MESSAGE,
    )


@router.post("/v1/ai/{action}", response_model=AiActionResponse)
def run_ai_action(
    action: str,
    req: AiActionRequest,
    current_user: User = Depends(get_current_user),
    use_case: RunAiActionUseCase = Depends(get_run_ai_action_use_case),
):
    try:
        output = use_case.execute(RunAiActionInput(user_id=current_user.id, action=action, params=req.params))
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    message = None
    if output.denial_reason == "feature_locked":
        message = UPGRADE_MESSAGE
    elif output.denial_reason == "quota_exhausted":
        message = QUOTA_MESSAGE
    return AiActionResponse(
        action=output.action,
        allowed=output.allowed,
        result=output.result,
        plan_code=output.plan_code,
        remaining_ai_uses=output.remaining_ai_uses,
        denial_reason=output.denial_reason,
        message=message,
    )
