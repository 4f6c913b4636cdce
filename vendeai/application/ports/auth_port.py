from __future__ import annotations

from datetime import datetime
from typing import Protocol

from vendeai.domain.entities.user import AuthIdentity, AuthProvider, AuthSession, User


class AuthPort(Protocol):
    def get_user_by_id(self, *, user_id: str) -> User | None:
        ...

    def get_user_by_email(self, *, email: str) -> User | None:
        ...

    def create_user(
        self,
        *,
        user_id: str,
        name: str,
        email: str,
        email_verified: bool,
        is_active: bool,
        avatar_url: str | None,
        locale: str,
        created_at: datetime,
        updated_at: datetime,
    ) -> User:
        ...

    def update_user_email_verified(self, *, user_id: str, email_verified: bool) -> None:
        ...

    def update_user_profile(
        self,
        *,
        user_id: str,
        name: str,
        avatar_url: str | None,
        locale: str,
        updated_at: datetime,
    ) -> User:
        ...

    def create_identity(
        self,
        *,
        identity_id: str,
        user_id: str,
        provider: AuthProvider,
        provider_subject: str | None,
        password_hash: str | None,
        created_at: datetime,
    ) -> AuthIdentity:
        ...

    def get_identity_for_user_provider(
        self,
        *,
        user_id: str,
        provider: AuthProvider,
    ) -> AuthIdentity | None:
        ...

    def get_identity_by_provider_subject(
        self,
        *,
        provider: AuthProvider,
        provider_subject: str,
    ) -> AuthIdentity | None:
        ...

    def update_identity_provider_subject(self, *, identity_id: str, provider_subject: str) -> None:
        ...

    def update_identity_password_hash(self, *, identity_id: str, password_hash: str) -> None:
        ...

    def get_local_identity_by_email(self, *, email: str) -> tuple[User, AuthIdentity] | None:
        ...

    def create_session(
        self,
        *,
        session_id: str,
        user_id: str,
        token_hash: str,
        expires_at: datetime,
        user_agent: str | None,
        ip: str | None,
        created_at: datetime,
    ) -> AuthSession:
        ...

    def get_session_by_id(self, *, session_id: str) -> AuthSession | None:
        ...

    def delete_session_by_token_hash(self, *, token_hash: str) -> bool:
        ...
