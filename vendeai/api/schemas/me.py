from __future__ import annotations

from pydantic import BaseModel, Field

from vendeai.api.schemas.auth import AuthUserResponse
from vendeai.api.schemas.entitlements import EntitlementsResponse


class MeResponse(BaseModel):
    user: AuthUserResponse
    entitlements: EntitlementsResponse


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(default=None, max_length=120)
    avatar_url: str | None = Field(default=None, max_length=2048)
    locale: str | None = Field(default=None, max_length=8)
