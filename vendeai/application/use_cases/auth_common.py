from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from vendeai.application.dto.auth import AuthUserOutput, SessionOutput
from vendeai.application.ports.auth_port import AuthPort
from vendeai.application.ports.token_port import TokenPort
from vendeai.domain.entities.user import User


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def build_auth_user_output(user: User) -> AuthUserOutput:
    return AuthUserOutput(
        id=user.id,
        name=user.name,
        email=user.email,
        email_verified=user.email_verified,
        is_active=user.is_active,
        avatar_url=user.avatar_url,
        locale=user.locale,
    )


def issue_session(
    *,
    user: User,
    auth_port: AuthPort,
    token_port: TokenPort,
    user_agent: str | None,
    ip: str | None,
    created: bool = False,
) -> SessionOutput:
    """Create one new session row; other sessions of the user stay valid."""
    now = utcnow()
    session_id = str(uuid4())
    token, expires_at = token_port.create_session_token(user_id=user.id, session_id=session_id, now=now)
    auth_port.create_session(
        session_id=session_id,
        user_id=user.id,
        token_hash=token_port.hash_session_token(token=token),
        expires_at=expires_at,
        user_agent=user_agent,
        ip=ip,
        created_at=now,
    )
    logger.info("auth: session_issued user_id=%s session_id=%s", user.id, session_id)
    return SessionOutput(
        user=build_auth_user_output(user),
        session_token=token,
        expires_at=expires_at,
        created=created,
    )
