from __future__ import annotations

from dataclasses import dataclass

from vendeai.application.dto.auth import AuthUserOutput
from vendeai.application.dto.entitlements import UserEntitlementsOutput


@dataclass(frozen=True)
class MeOutput:
    user: AuthUserOutput
    entitlements: UserEntitlementsOutput
