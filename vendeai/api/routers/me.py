from __future__ import annotations

from fastapi import APIRouter, Depends

from vendeai.api.deps import get_current_user, get_get_me_use_case, get_update_profile_use_case
from vendeai.api.errors import to_http_exception
from vendeai.api.schemas.auth import AuthUserResponse
from vendeai.api.schemas.me import MeResponse, UpdateProfileRequest
from vendeai.application.dto.auth import UpdateProfileInput
from vendeai.application.use_cases.get_me import GetMeUseCase
from vendeai.application.use_cases.update_profile import UpdateProfileUseCase
from vendeai.domain.entities.user import User
from vendeai.domain.exceptions import DomainError


router = APIRouter()


@router.get("/v1/me", response_model=MeResponse)
def get_me(
    current_user: User = Depends(get_current_user),
    use_case: GetMeUseCase = Depends(get_get_me_use_case),
):
    output = use_case.execute(user=current_user)
    entitlements = output.entitlements
    return MeResponse(
        user=AuthUserResponse(
            id=output.user.id,
            name=output.user.name,
            email=output.user.email,
            email_verified=output.user.email_verified,
            is_active=output.user.is_active,
            avatar_url=output.user.avatar_url,
            locale=output.user.locale,
        ),
        entitlements={
            "plan_code": entitlements.plan_code,
            "status": entitlements.status,
            "ai_uses": entitlements.ai_uses,
            "remaining_ai_uses": entitlements.remaining_ai_uses,
            "capabilities": entitlements.capabilities,
            "limits": entitlements.limits,
        },
    )


@router.put("/v1/me", response_model=AuthUserResponse)
def update_me(
    req: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    use_case: UpdateProfileUseCase = Depends(get_update_profile_use_case),
):
    try:
        output = use_case.execute(
            UpdateProfileInput(
                user_id=current_user.id,
                name=req.name,
                avatar_url=req.avatar_url,
                locale=req.locale,
            )
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return AuthUserResponse(
        id=output.id,
        name=output.name,
        email=output.email,
        email_verified=output.email_verified,
        is_active=output.is_active,
        avatar_url=output.avatar_url,
        locale=output.locale,
    )
