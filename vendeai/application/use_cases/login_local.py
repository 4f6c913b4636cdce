from __future__ import annotations

import logging

from vendeai.application.dto.auth import LoginLocalInput, SessionOutput
from vendeai.application.ports.auth_port import AuthPort
from vendeai.application.ports.password_hasher_port import PasswordHasherPort
from vendeai.application.ports.token_port import TokenPort
from vendeai.domain.exceptions import InvalidCredentialsError, UserInactiveError

from .auth_common import issue_session, normalize_email


logger = logging.getLogger(__name__)


class LoginLocalUseCase:
    def __init__(
        self,
        *,
        auth_port: AuthPort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
    ):
        self._auth_port = auth_port
        self._password_hasher = password_hasher
        self._token_port = token_port

    def execute(self, command: LoginLocalInput) -> SessionOutput:
        email = normalize_email(command.email)
        result = self._auth_port.get_local_identity_by_email(email=email)
        # Unknown email, OAuth-only account and wrong password share one message.
        if result is None:
            raise InvalidCredentialsError("Invalid credentials.")

        user, identity = result
        if not identity.password_hash:
            raise InvalidCredentialsError("Invalid credentials.")

        verified, replacement_hash = self._password_hasher.verify_and_update(
            command.password,
            identity.password_hash,
        )
        if not verified:
            raise InvalidCredentialsError("Invalid credentials.")

        if not user.is_active:
            raise UserInactiveError("User is inactive.")

        if replacement_hash:
            self._auth_port.update_identity_password_hash(
                identity_id=identity.id,
                password_hash=replacement_hash,
            )
            logger.info("login_local: password_rehashed user_id=%s", user.id)

        return issue_session(
            user=user,
            auth_port=self._auth_port,
            token_port=self._token_port,
            user_agent=command.user_agent,
            ip=command.ip,
        )
