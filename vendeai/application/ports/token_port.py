from __future__ import annotations

from datetime import datetime
from typing import Protocol

from vendeai.application.dto.auth import SessionTokenPayload


class TokenPort(Protocol):
    def create_session_token(self, *, user_id: str, session_id: str, now: datetime) -> tuple[str, datetime]:
        ...

    def decode_session_token(self, *, token: str) -> SessionTokenPayload:
        ...

    def hash_session_token(self, *, token: str) -> str:
        ...
