from __future__ import annotations

import logging

from vendeai.application.dto.auth import LogoutInput
from vendeai.application.ports.auth_port import AuthPort
from vendeai.application.ports.token_port import TokenPort


logger = logging.getLogger(__name__)


class LogoutSessionUseCase:
    def __init__(self, *, auth_port: AuthPort, token_port: TokenPort):
        self._auth_port = auth_port
        self._token_port = token_port

    def execute(self, command: LogoutInput) -> bool:
        token = command.session_token.strip()
        if not token:
            return False
        deleted = self._auth_port.delete_session_by_token_hash(
            token_hash=self._token_port.hash_session_token(token=token),
        )
        logger.info("logout: session_deleted=%s", deleted)
        return deleted
