from __future__ import annotations

from vendeai.application.dto.me import MeOutput
from vendeai.application.use_cases.auth_common import build_auth_user_output
from vendeai.application.use_cases.get_user_entitlements import GetUserEntitlementsUseCase
from vendeai.domain.entities.user import User


class GetMeUseCase:
    def __init__(self, *, get_user_entitlements_use_case: GetUserEntitlementsUseCase):
        self._get_user_entitlements_use_case = get_user_entitlements_use_case

    def execute(self, *, user: User) -> MeOutput:
        return MeOutput(
            user=build_auth_user_output(user),
            entitlements=self._get_user_entitlements_use_case.execute(user_id=user.id),
        )
