from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from vendeai.api.errors import to_http_exception
from vendeai.application.ports.oauth_port import OAuthIdentityPort
from vendeai.application.use_cases.apply_confirmed_payment import ApplyConfirmedPaymentUseCase
from vendeai.application.use_cases.attempt_ai_use import AttemptAiUseUseCase
from vendeai.application.use_cases.authenticate_session import AuthenticateSessionUseCase
from vendeai.application.use_cases.cancel_subscription import CancelSubscriptionUseCase
from vendeai.application.use_cases.confirm_async_payment import ConfirmAsyncPaymentUseCase
from vendeai.application.use_cases.confirm_card_payment import ConfirmCardPaymentUseCase
from vendeai.application.use_cases.create_async_payment import CreateAsyncPaymentUseCase
from vendeai.application.use_cases.create_card_intent import CreateCardIntentUseCase
from vendeai.application.use_cases.get_async_payment_status import GetAsyncPaymentStatusUseCase
from vendeai.application.use_cases.get_me import GetMeUseCase
from vendeai.application.use_cases.get_subscription_status import GetSubscriptionStatusUseCase
from vendeai.application.use_cases.get_user_entitlements import GetUserEntitlementsUseCase
from vendeai.application.use_cases.list_plans import ListPlansUseCase
from vendeai.application.use_cases.login_local import LoginLocalUseCase
from vendeai.application.use_cases.login_oauth import LoginOAuthUseCase
from vendeai.application.use_cases.logout_session import LogoutSessionUseCase
from vendeai.application.use_cases.process_mercadopago_webhook import ProcessMercadoPagoWebhookUseCase
from vendeai.application.use_cases.process_stripe_webhook import ProcessStripeWebhookUseCase
from vendeai.application.use_cases.register_user import RegisterUserUseCase
from vendeai.application.use_cases.run_ai_action import RunAiActionUseCase
from vendeai.application.use_cases.update_profile import UpdateProfileUseCase
from vendeai.domain.entities.user import User
from vendeai.domain.exceptions import DomainError
from vendeai.infrastructure.clients.facebook_graph_client import FacebookGraphClient
from vendeai.infrastructure.clients.gemini_client import GeminiClient
from vendeai.infrastructure.clients.google_oidc_client import GoogleOidcClient
from vendeai.infrastructure.clients.mercadopago_client import MercadoPagoClient
from vendeai.infrastructure.clients.stripe_client import StripeClient
from vendeai.infrastructure.db.engine import get_engine
from vendeai.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from vendeai.infrastructure.security.password_hasher import PasswordHasher
from vendeai.infrastructure.security.token_service import JwtSessionTokenService
from vendeai.shared.config import get_settings


def _get_db_engine():
    settings = get_settings()
    if not settings.database_url:
        raise HTTPException(status_code=500, detail="DATABASE_URL is required.")
    return get_engine(settings.database_url)


def _get_accounts_repository() -> SqlAccountsRepository:
    return SqlAccountsRepository(_get_db_engine())


@lru_cache(maxsize=1)
def _get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@lru_cache(maxsize=1)
def _get_token_service() -> JwtSessionTokenService:
    settings = get_settings()
    if not settings.session_secret:
        raise HTTPException(status_code=500, detail="SESSION_SECRET is required.")
    return JwtSessionTokenService(
        session_secret=settings.session_secret,
        session_ttl_days=settings.session_ttl_days,
    )


@lru_cache(maxsize=1)
def _get_oauth_clients() -> dict[str, OAuthIdentityPort]:
    settings = get_settings()
    clients: dict[str, OAuthIdentityPort] = {
        "facebook": FacebookGraphClient(
            graph_base=settings.facebook_graph_base,
            app_secret=settings.facebook_app_secret,
            timeout_seconds=settings.provider_timeout_seconds,
        ),
    }
    if settings.google_client_id:
        clients["google"] = GoogleOidcClient(client_id=settings.google_client_id)
    return clients


@lru_cache(maxsize=1)
def _get_stripe_client() -> StripeClient:
    settings = get_settings()
    if not settings.stripe_secret_key:
        raise HTTPException(status_code=500, detail="STRIPE_SECRET_KEY is required.")
    return StripeClient(
        secret_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
        timeout_seconds=settings.provider_timeout_seconds,
    )


@lru_cache(maxsize=1)
def _get_mercadopago_client() -> MercadoPagoClient:
    settings = get_settings()
    if not settings.mercadopago_access_token:
        raise HTTPException(status_code=500, detail="MERCADOPAGO_ACCESS_TOKEN is required.")
    return MercadoPagoClient(
        access_token=settings.mercadopago_access_token,
        webhook_secret=settings.mercadopago_webhook_secret,
        api_base=settings.mercadopago_api_base,
        notification_url=settings.mercadopago_notification_url or None,
        pix_expiration_minutes=settings.mercadopago_pix_expiration_minutes,
        timeout_seconds=settings.provider_timeout_seconds,
    )


@lru_cache(maxsize=1)
def _get_gemini_client() -> GeminiClient:
    settings = get_settings()
    if not settings.gemini_api_key:
        raise HTTPException(status_code=500, detail="GEMINI_API_KEY is required.")
    return GeminiClient(
        api_key=settings.gemini_api_key,
        api_base=settings.gemini_api_base,
        timeout_seconds=settings.gemini_timeout_seconds,
    )


def get_register_user_use_case() -> RegisterUserUseCase:
    return RegisterUserUseCase(
        accounts_port=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
        token_port=_get_token_service(),
    )


def get_login_local_use_case() -> LoginLocalUseCase:
    return LoginLocalUseCase(
        auth_port=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
        token_port=_get_token_service(),
    )


def get_login_oauth_use_case() -> LoginOAuthUseCase:
    return LoginOAuthUseCase(
        accounts_port=_get_accounts_repository(),
        oauth_ports=_get_oauth_clients(),
        token_port=_get_token_service(),
    )


def get_logout_session_use_case() -> LogoutSessionUseCase:
    return LogoutSessionUseCase(
        auth_port=_get_accounts_repository(),
        token_port=_get_token_service(),
    )


def get_authenticate_session_use_case() -> AuthenticateSessionUseCase:
    return AuthenticateSessionUseCase(
        auth_port=_get_accounts_repository(),
        token_port=_get_token_service(),
    )


def get_update_profile_use_case() -> UpdateProfileUseCase:
    return UpdateProfileUseCase(auth_port=_get_accounts_repository())


def get_list_plans_use_case() -> ListPlansUseCase:
    return ListPlansUseCase()


def get_get_user_entitlements_use_case() -> GetUserEntitlementsUseCase:
    return GetUserEntitlementsUseCase(subscriptions_port=_get_accounts_repository())


def get_get_me_use_case() -> GetMeUseCase:
    return GetMeUseCase(get_user_entitlements_use_case=get_get_user_entitlements_use_case())


def get_attempt_ai_use_use_case() -> AttemptAiUseUseCase:
    return AttemptAiUseUseCase(subscriptions_port=_get_accounts_repository())


def get_run_ai_action_use_case() -> RunAiActionUseCase:
    return RunAiActionUseCase(
        get_user_entitlements_use_case=get_get_user_entitlements_use_case(),
        attempt_ai_use_use_case=get_attempt_ai_use_use_case(),
        ai_completion_port=_get_gemini_client(),
    )


def _get_apply_confirmed_payment_use_case() -> ApplyConfirmedPaymentUseCase:
    return ApplyConfirmedPaymentUseCase(subscriptions_port=_get_accounts_repository())


def get_create_card_intent_use_case() -> CreateCardIntentUseCase:
    return CreateCardIntentUseCase(
        stripe_port=_get_stripe_client(),
        currency=get_settings().stripe_currency,
    )


def get_confirm_card_payment_use_case() -> ConfirmCardPaymentUseCase:
    return ConfirmCardPaymentUseCase(
        stripe_port=_get_stripe_client(),
        apply_confirmed_payment_use_case=_get_apply_confirmed_payment_use_case(),
    )


def get_create_async_payment_use_case() -> CreateAsyncPaymentUseCase:
    return CreateAsyncPaymentUseCase(
        auth_port=_get_accounts_repository(),
        mercadopago_port=_get_mercadopago_client(),
    )


def get_confirm_async_payment_use_case() -> ConfirmAsyncPaymentUseCase:
    return ConfirmAsyncPaymentUseCase(
        mercadopago_port=_get_mercadopago_client(),
        apply_confirmed_payment_use_case=_get_apply_confirmed_payment_use_case(),
    )


def get_get_async_payment_status_use_case() -> GetAsyncPaymentStatusUseCase:
    return GetAsyncPaymentStatusUseCase(mercadopago_port=_get_mercadopago_client())


def get_cancel_subscription_use_case() -> CancelSubscriptionUseCase:
    return CancelSubscriptionUseCase(
        subscriptions_port=_get_accounts_repository(),
        stripe_port=_get_stripe_client(),
    )


def get_get_subscription_status_use_case() -> GetSubscriptionStatusUseCase:
    return GetSubscriptionStatusUseCase(subscriptions_port=_get_accounts_repository())


def get_process_stripe_webhook_use_case() -> ProcessStripeWebhookUseCase:
    settings = get_settings()
    if not settings.stripe_webhook_secret:
        raise HTTPException(status_code=500, detail="STRIPE_WEBHOOK_SECRET is required.")
    return ProcessStripeWebhookUseCase(
        stripe_port=_get_stripe_client(),
        confirm_card_payment_use_case=get_confirm_card_payment_use_case(),
    )


def get_process_mercadopago_webhook_use_case() -> ProcessMercadoPagoWebhookUseCase:
    settings = get_settings()
    if not settings.mercadopago_webhook_secret:
        raise HTTPException(status_code=500, detail="MERCADOPAGO_WEBHOOK_SECRET is required.")
    return ProcessMercadoPagoWebhookUseCase(
        mercadopago_port=_get_mercadopago_client(),
        apply_confirmed_payment_use_case=_get_apply_confirmed_payment_use_case(),
    )


def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header.")
    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing session token.")
    return token


def get_current_user(
    token: str = Depends(get_bearer_token),
    use_case: AuthenticateSessionUseCase = Depends(get_authenticate_session_use_case),
) -> User:
    try:
        return use_case.execute(token=token)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
