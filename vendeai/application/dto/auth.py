from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AuthUserOutput:
    id: str
    name: str
    email: str
    email_verified: bool
    is_active: bool
    avatar_url: str | None
    locale: str


@dataclass(frozen=True)
class RegisterUserInput:
    name: str
    email: str
    password: str
    user_agent: str | None
    ip: str | None


@dataclass(frozen=True)
class LoginLocalInput:
    email: str
    password: str
    user_agent: str | None
    ip: str | None


@dataclass(frozen=True)
class LoginOAuthInput:
    provider: str
    token: str
    user_agent: str | None
    ip: str | None


@dataclass(frozen=True)
class LogoutInput:
    session_token: str


@dataclass(frozen=True)
class SessionOutput:
    user: AuthUserOutput
    session_token: str
    expires_at: datetime
    created: bool = False


@dataclass(frozen=True)
class SessionTokenPayload:
    user_id: str
    session_id: str


@dataclass(frozen=True)
class OAuthIdentityInfo:
    provider: str
    subject: str
    email: str
    email_verified: bool
    name: str | None
    avatar_url: str | None


@dataclass(frozen=True)
class UpdateProfileInput:
    user_id: str
    name: str | None
    avatar_url: str | None
    locale: str | None
