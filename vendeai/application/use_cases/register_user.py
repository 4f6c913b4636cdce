from __future__ import annotations

from uuid import uuid4

from vendeai.application.dto.auth import RegisterUserInput, SessionOutput
from vendeai.application.ports.accounts_port import AccountsPort
from vendeai.application.ports.password_hasher_port import PasswordHasherPort
from vendeai.application.ports.token_port import TokenPort
from vendeai.domain.exceptions import EmailAlreadyExistsError, ValidationError
from vendeai.domain.services.plan_catalog import DEFAULT_PLAN_CODE

from .auth_common import issue_session, normalize_email, utcnow


MIN_PASSWORD_LENGTH = 8


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        accounts_port: AccountsPort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
    ):
        self._accounts_port = accounts_port
        self._password_hasher = password_hasher
        self._token_port = token_port

    def execute(self, command: RegisterUserInput) -> SessionOutput:
        name = command.name.strip()
        email = normalize_email(command.email)
        password = command.password

        if not name:
            raise ValidationError("name is required.")
        if not email or "@" not in email:
            raise ValidationError("a valid email is required.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"password must have at least {MIN_PASSWORD_LENGTH} characters.")

        password_hash = self._password_hasher.hash(password)

        def _tx(accounts: AccountsPort) -> SessionOutput:
            if accounts.get_user_by_email(email=email) is not None:
                raise EmailAlreadyExistsError("Email already in use.")

            now = utcnow()
            user = accounts.create_user(
                user_id=str(uuid4()),
                name=name,
                email=email,
                email_verified=False,
                is_active=True,
                avatar_url=None,
                locale="pt",
                created_at=now,
                updated_at=now,
            )
            accounts.create_identity(
                identity_id=str(uuid4()),
                user_id=user.id,
                provider="local",
                provider_subject=None,
                password_hash=password_hash,
                created_at=now,
            )
            accounts.ensure_subscription(user_id=user.id, plan_code=DEFAULT_PLAN_CODE, now=now)
            return issue_session(
                user=user,
                auth_port=accounts,
                token_port=self._token_port,
                user_agent=command.user_agent,
                ip=command.ip,
                created=True,
            )

        return self._accounts_port.execute_in_transaction(_tx)
