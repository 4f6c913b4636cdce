from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from fakes import FakeAccountsPort, FakeOAuthPort, FakePasswordHasher, FakeTokenService
from vendeai.application.dto.auth import (
    LoginLocalInput,
    LoginOAuthInput,
    LogoutInput,
    OAuthIdentityInfo,
    RegisterUserInput,
)
from vendeai.application.use_cases.authenticate_session import AuthenticateSessionUseCase
from vendeai.application.use_cases.login_local import LoginLocalUseCase
from vendeai.application.use_cases.login_oauth import LoginOAuthUseCase
from vendeai.application.use_cases.logout_session import LogoutSessionUseCase
from vendeai.application.use_cases.register_user import RegisterUserUseCase
from vendeai.domain.exceptions import (
    AccountLinkRequiredError,
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    SessionInvalidError,
    UnsupportedOAuthProviderError,
    UserInactiveError,
    ValidationError,
)


def _register(accounts: FakeAccountsPort, tokens: FakeTokenService, email: str = "user@example.com"):
    use_case = RegisterUserUseCase(
        accounts_port=accounts,
        password_hasher=FakePasswordHasher(),
        token_port=tokens,
    )
    return use_case.execute(
        RegisterUserInput(name="User", email=email, password="12345678", user_agent="pytest", ip="127.0.0.1")
    )


def _login_local(accounts: FakeAccountsPort, tokens: FakeTokenService, *, email: str, password: str):
    use_case = LoginLocalUseCase(auth_port=accounts, password_hasher=FakePasswordHasher(), token_port=tokens)
    return use_case.execute(LoginLocalInput(email=email, password=password, user_agent=None, ip=None))


def _oauth_use_case(accounts: FakeAccountsPort, tokens: FakeTokenService, info: OAuthIdentityInfo):
    return LoginOAuthUseCase(
        accounts_port=accounts,
        oauth_ports={info.provider: FakeOAuthPort({"provider-token": info})},
        token_port=tokens,
    )


def _google_info(**overrides) -> OAuthIdentityInfo:
    values = dict(
        provider="google",
        subject="google-sub-1",
        email="user@example.com",
        email_verified=True,
        name="Google User",
        avatar_url="https://example.com/a.png",
    )
    values.update(overrides)
    return OAuthIdentityInfo(**values)


def test_register_user_creates_identity_free_subscription_and_session():
    accounts = FakeAccountsPort()
    tokens = FakeTokenService()

    output = _register(accounts, tokens, email="  User@Example.com ")

    assert output.created is True
    assert output.user.email == "user@example.com"
    local_identity = accounts.get_identity_for_user_provider(user_id=output.user.id, provider="local")
    assert local_identity is not None
    assert local_identity.password_hash == "hashed::12345678"
    subscription = accounts.get_subscription_for_user(user_id=output.user.id)
    assert subscription is not None
    assert subscription.plan_code == "free"
    assert subscription.ai_uses_count == 0
    assert len(accounts.sessions) == 1
    assert accounts.transactions == 1


def test_register_user_rejects_duplicate_email():
    accounts = FakeAccountsPort()
    tokens = FakeTokenService()
    _register(accounts, tokens)

    with pytest.raises(EmailAlreadyExistsError):
        _register(accounts, tokens, email="USER@example.com")

    assert len(accounts.users) == 1


@pytest.mark.parametrize(
    "name,email,password",
    [
        ("", "user@example.com", "12345678"),
        ("User", "not-an-email", "12345678"),
        ("User", "user@example.com", "short"),
    ],
)
def test_register_user_validates_input(name, email, password):
    use_case = RegisterUserUseCase(
        accounts_port=FakeAccountsPort(),
        password_hasher=FakePasswordHasher(),
        token_port=FakeTokenService(),
    )

    with pytest.raises(ValidationError):
        use_case.execute(RegisterUserInput(name=name, email=email, password=password, user_agent=None, ip=None))


def test_login_local_returns_new_session_and_keeps_previous_ones():
    accounts = FakeAccountsPort()
    tokens = FakeTokenService()
    registered = _register(accounts, tokens)

    output = _login_local(accounts, tokens, email="user@example.com", password="12345678")

    assert output.user.id == registered.user.id
    assert output.created is False
    assert output.session_token != registered.session_token
    assert len(accounts.sessions) == 2


def test_login_local_failures_share_one_message():
    accounts = FakeAccountsPort()
    tokens = FakeTokenService()
    _register(accounts, tokens)

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        _login_local(accounts, tokens, email="user@example.com", password="wrong-password")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        _login_local(accounts, tokens, email="nobody@example.com", password="12345678")

    assert str(wrong_password.value) == str(unknown_email.value)


def test_login_local_rejects_inactive_user():
    accounts = FakeAccountsPort()
    tokens = FakeTokenService()
    registered = _register(accounts, tokens)
    accounts.users[registered.user.id] = replace(accounts.users[registered.user.id], is_active=False)

    with pytest.raises(UserInactiveError):
        _login_local(accounts, tokens, email="user@example.com", password="12345678")


def test_login_local_upgrades_legacy_password_hash():
    accounts = FakeAccountsPort()
    tokens = FakeTokenService()
    registered = _register(accounts, tokens)
    identity = accounts.get_identity_for_user_provider(user_id=registered.user.id, provider="local")
    accounts.update_identity_password_hash(identity_id=identity.id, password_hash="legacy::12345678")

    _login_local(accounts, tokens, email="user@example.com", password="12345678")

    identity = accounts.get_identity_for_user_provider(user_id=registered.user.id, provider="local")
    assert identity.password_hash == "hashed::12345678"


def test_login_oauth_creates_user_with_free_subscription():
    accounts = FakeAccountsPort()
    tokens = FakeTokenService()
    use_case = _oauth_use_case(accounts, tokens, _google_info())

    output = use_case.execute(
        LoginOAuthInput(provider="google", token="provider-token", user_agent=None, ip=None)
    )

    assert output.created is True
    assert output.user.name == "Google User"
    assert output.user.email_verified is True
    assert output.user.avatar_url == "https://example.com/a.png"
    assert accounts.get_subscription_for_user(user_id=output.user.id).plan_code == "free"


def test_login_oauth_links_existing_user_when_email_is_verified():
    accounts = FakeAccountsPort()
    tokens = FakeTokenService()
    registered = _register(accounts, tokens)
    use_case = _oauth_use_case(accounts, tokens, _google_info())

    output = use_case.execute(
        LoginOAuthInput(provider="google", token="provider-token", user_agent=None, ip=None)
    )

    assert output.user.id == registered.user.id
    assert output.created is False
    google_identity = accounts.get_identity_for_user_provider(user_id=registered.user.id, provider="google")
    assert google_identity is not None
    assert google_identity.provider_subject == "google-sub-1"
    assert accounts.users[registered.user.id].email_verified is True


def test_login_oauth_refuses_unverified_email_merge():
    accounts = FakeAccountsPort()
    tokens = FakeTokenService()
    registered = _register(accounts, tokens)
    info = _google_info(provider="facebook", subject="fb-1", email_verified=False)
    use_case = _oauth_use_case(accounts, tokens, info)

    with pytest.raises(AccountLinkRequiredError):
        use_case.execute(LoginOAuthInput(provider="facebook", token="provider-token", user_agent=None, ip=None))

    assert accounts.get_identity_for_user_provider(user_id=registered.user.id, provider="facebook") is None


def test_login_oauth_finds_user_by_provider_subject_on_repeat_login():
    accounts = FakeAccountsPort()
    tokens = FakeTokenService()
    use_case = _oauth_use_case(accounts, tokens, _google_info())
    command = LoginOAuthInput(provider="google", token="provider-token", user_agent=None, ip=None)

    first = use_case.execute(command)
    second = use_case.execute(command)

    assert second.user.id == first.user.id
    assert second.created is False
    assert len(accounts.users) == 1


def test_login_oauth_rejects_unknown_provider():
    accounts = FakeAccountsPort()
    use_case = _oauth_use_case(accounts, FakeTokenService(), _google_info())

    with pytest.raises(UnsupportedOAuthProviderError):
        use_case.execute(LoginOAuthInput(provider="twitter", token="provider-token", user_agent=None, ip=None))


def test_authenticate_session_resolves_user_until_logout():
    accounts = FakeAccountsPort()
    tokens = FakeTokenService()
    registered = _register(accounts, tokens)
    authenticate = AuthenticateSessionUseCase(auth_port=accounts, token_port=tokens)
    logout = LogoutSessionUseCase(auth_port=accounts, token_port=tokens)

    assert authenticate.execute(token=registered.session_token).id == registered.user.id
    assert logout.execute(LogoutInput(session_token=registered.session_token)) is True
    assert logout.execute(LogoutInput(session_token=registered.session_token)) is False

    with pytest.raises(SessionInvalidError):
        authenticate.execute(token=registered.session_token)


def test_authenticate_session_rejects_expired_session():
    accounts = FakeAccountsPort()
    tokens = FakeTokenService()
    registered = _register(accounts, tokens)
    (session_id, session), = accounts.sessions.items()
    accounts.sessions[session_id] = replace(session, expires_at=session.created_at - timedelta(seconds=1))

    with pytest.raises(SessionInvalidError, match="expired"):
        AuthenticateSessionUseCase(auth_port=accounts, token_port=tokens).execute(token=registered.session_token)


def test_authenticate_session_rejects_malformed_token():
    with pytest.raises(SessionInvalidError):
        AuthenticateSessionUseCase(auth_port=FakeAccountsPort(), token_port=FakeTokenService()).execute(
            token="garbage"
        )
