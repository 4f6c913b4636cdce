from __future__ import annotations

import hmac

from vendeai.application.ports.auth_port import AuthPort
from vendeai.application.ports.token_port import TokenPort
from vendeai.domain.entities.user import User
from vendeai.domain.exceptions import SessionInvalidError, UserInactiveError

from .auth_common import utcnow


class AuthenticateSessionUseCase:
    """Resolve a bearer session token to its user.

    Expired sessions are rejected here rather than purged.
    """

    def __init__(self, *, auth_port: AuthPort, token_port: TokenPort):
        self._auth_port = auth_port
        self._token_port = token_port

    def execute(self, *, token: str) -> User:
        token = token.strip()
        if not token:
            raise SessionInvalidError("Missing session token.")

        try:
            payload = self._token_port.decode_session_token(token=token)
        except ValueError as exc:
            raise SessionInvalidError(str(exc)) from exc

        session = self._auth_port.get_session_by_id(session_id=payload.session_id)
        if session is None:
            raise SessionInvalidError("Session not found. Log in again.")
        if not hmac.compare_digest(session.token_hash, self._token_port.hash_session_token(token=token)):
            raise SessionInvalidError("Session not found. Log in again.")
        if session.expires_at <= utcnow():
            raise SessionInvalidError("Session expired. Log in again.")
        if session.user_id != payload.user_id:
            raise SessionInvalidError("Session does not match token subject.")

        user = self._auth_port.get_user_by_id(user_id=session.user_id)
        if user is None:
            raise SessionInvalidError("User not found for session.")
        if not user.is_active:
            raise UserInactiveError("User is inactive.")
        return user
