from __future__ import annotations

from typing import Protocol

from vendeai.application.dto.auth import OAuthIdentityInfo


class OAuthIdentityPort(Protocol):
    def verify_token(self, *, token: str) -> OAuthIdentityInfo:
        ...
