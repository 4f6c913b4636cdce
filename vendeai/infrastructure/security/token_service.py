from __future__ import annotations

import hashlib
from datetime import datetime, timedelta

import jwt

from vendeai.application.dto.auth import SessionTokenPayload
from vendeai.application.ports.token_port import TokenPort


SESSION_TOKEN_TYPE = "session"


class JwtSessionTokenService(TokenPort):
    """Signed bearer tokens bound to a stored session row.

    The token carries the session id; the row stores only the token's SHA-256
    so a leaked table cannot be replayed.
    """

    def __init__(self, *, session_secret: str, session_ttl_days: int = 7):
        self._session_secret = session_secret
        self._session_ttl_days = session_ttl_days

    def create_session_token(self, *, user_id: str, session_id: str, now: datetime) -> tuple[str, datetime]:
        exp = now + timedelta(days=self._session_ttl_days)
        payload = {
            "sub": user_id,
            "sid": session_id,
            "type": SESSION_TOKEN_TYPE,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
        token = jwt.encode(payload, self._session_secret, algorithm="HS256")
        return token, exp

    def decode_session_token(self, *, token: str) -> SessionTokenPayload:
        try:
            payload = jwt.decode(token, self._session_secret, algorithms=["HS256"])
        except jwt.ExpiredSignatureError as exc:
            raise ValueError("Session expired. Log in again.") from exc
        except jwt.PyJWTError as exc:
            raise ValueError("Invalid session token.") from exc

        if payload.get("type") != SESSION_TOKEN_TYPE:
            raise ValueError("Invalid token type.")

        user_id = payload.get("sub")
        if not user_id or not isinstance(user_id, str):
            raise ValueError("Invalid token subject.")

        session_id = payload.get("sid")
        if not session_id or not isinstance(session_id, str):
            raise ValueError("Invalid session id.")

        return SessionTokenPayload(user_id=user_id, session_id=session_id)

    def hash_session_token(self, *, token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()
