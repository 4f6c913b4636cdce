from __future__ import annotations

import logging
from collections.abc import Mapping
from uuid import uuid4

from vendeai.application.dto.auth import LoginOAuthInput, OAuthIdentityInfo, SessionOutput
from vendeai.application.ports.accounts_port import AccountsPort
from vendeai.application.ports.oauth_port import OAuthIdentityPort
from vendeai.application.ports.token_port import TokenPort
from vendeai.domain.entities.user import User
from vendeai.domain.exceptions import (
    AccountLinkRequiredError,
    UnsupportedOAuthProviderError,
    UserInactiveError,
)
from vendeai.domain.services.plan_catalog import DEFAULT_PLAN_CODE

from .auth_common import issue_session, normalize_email, utcnow


logger = logging.getLogger(__name__)


class LoginOAuthUseCase:
    """Log in or register through an OAuth provider.

    Lookup order is (provider, subject), then email, then a new account. An
    existing account is only adopted by email when the provider vouches for
    that email; an unverified match raises ``AccountLinkRequiredError``.
    """

    def __init__(
        self,
        *,
        accounts_port: AccountsPort,
        oauth_ports: Mapping[str, OAuthIdentityPort],
        token_port: TokenPort,
    ):
        self._accounts_port = accounts_port
        self._oauth_ports = oauth_ports
        self._token_port = token_port

    def execute(self, command: LoginOAuthInput) -> SessionOutput:
        oauth_port = self._oauth_ports.get(command.provider)
        if oauth_port is None:
            raise UnsupportedOAuthProviderError(f"Unsupported OAuth provider '{command.provider}'.")

        identity_info = oauth_port.verify_token(token=command.token)

        def _tx(accounts: AccountsPort) -> SessionOutput:
            user, created = self._resolve_user(accounts, identity_info)
            if not user.is_active:
                raise UserInactiveError("User is inactive.")
            return issue_session(
                user=user,
                auth_port=accounts,
                token_port=self._token_port,
                user_agent=command.user_agent,
                ip=command.ip,
                created=created,
            )

        return self._accounts_port.execute_in_transaction(_tx)

    def _resolve_user(self, accounts: AccountsPort, info: OAuthIdentityInfo) -> tuple[User, bool]:
        email = normalize_email(info.email)
        now = utcnow()

        identity = accounts.get_identity_by_provider_subject(
            provider=info.provider,
            provider_subject=info.subject,
        )
        if identity is not None:
            user = accounts.get_user_by_id(user_id=identity.user_id)
            if user is None:
                raise ValueError(f"User linked to {info.provider} identity was not found.")
            return self._sync_profile(accounts, user, info), False

        user = accounts.get_user_by_email(email=email)
        created = False
        if user is None:
            user_name = info.name.strip() if info.name and info.name.strip() else email.split("@")[0]
            user = accounts.create_user(
                user_id=str(uuid4()),
                name=user_name,
                email=email,
                email_verified=info.email_verified,
                is_active=True,
                avatar_url=info.avatar_url,
                locale="pt",
                created_at=now,
                updated_at=now,
            )
            accounts.ensure_subscription(user_id=user.id, plan_code=DEFAULT_PLAN_CODE, now=now)
            created = True
            logger.info("login_oauth: user_created provider=%s user_id=%s", info.provider, user.id)
        elif not info.email_verified:
            raise AccountLinkRequiredError(
                "An account with this email already exists. Log in with your password to link it."
            )
        else:
            logger.info("login_oauth: identity_linked provider=%s user_id=%s", info.provider, user.id)

        existing = accounts.get_identity_for_user_provider(user_id=user.id, provider=info.provider)
        if existing is None:
            accounts.create_identity(
                identity_id=str(uuid4()),
                user_id=user.id,
                provider=info.provider,
                provider_subject=info.subject,
                password_hash=None,
                created_at=now,
            )
        elif existing.provider_subject != info.subject:
            accounts.update_identity_provider_subject(
                identity_id=existing.id,
                provider_subject=info.subject,
            )

        return self._sync_profile(accounts, user, info), created

    def _sync_profile(self, accounts: AccountsPort, user: User, info: OAuthIdentityInfo) -> User:
        if info.email_verified and not user.email_verified:
            accounts.update_user_email_verified(user_id=user.id, email_verified=True)
            user = accounts.get_user_by_id(user_id=user.id) or user
        if info.avatar_url and not user.avatar_url:
            user = accounts.update_user_profile(
                user_id=user.id,
                name=user.name,
                avatar_url=info.avatar_url,
                locale=user.locale,
                updated_at=utcnow(),
            )
        return user
