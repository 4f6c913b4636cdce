from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


AuthProvider = Literal["local", "google", "facebook"]
Locale = Literal["pt", "en", "es"]

OAUTH_PROVIDERS: tuple[str, ...] = ("google", "facebook")
SUPPORTED_LOCALES: tuple[str, ...] = ("pt", "en", "es")


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    email_verified: bool
    is_active: bool
    avatar_url: str | None
    locale: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class AuthIdentity:
    id: str
    user_id: str
    provider: AuthProvider
    provider_subject: str | None
    password_hash: str | None
    created_at: datetime


@dataclass(frozen=True)
class AuthSession:
    id: str
    user_id: str
    token_hash: str
    expires_at: datetime
    user_agent: str | None
    ip: str | None
    created_at: datetime
