from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _csv(name: str, default: str = "") -> tuple[str, ...]:
    value = _env(name, default) or ""
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str
    session_secret: str
    session_ttl_days: int
    google_client_id: str
    facebook_graph_base: str
    facebook_app_secret: str
    stripe_secret_key: str
    stripe_webhook_secret: str
    stripe_currency: str
    mercadopago_access_token: str
    mercadopago_webhook_secret: str
    mercadopago_api_base: str
    mercadopago_notification_url: str
    mercadopago_pix_expiration_minutes: int
    provider_timeout_seconds: float
    gemini_api_key: str
    gemini_api_base: str
    gemini_timeout_seconds: float
    cors_origins: tuple[str, ...]
    log_level: str


def get_settings() -> Settings:
    return Settings(
        database_url=_env("DATABASE_URL", ""),
        session_secret=_env("SESSION_SECRET", ""),
        session_ttl_days=int(_env("SESSION_TTL_DAYS", "7")),
        google_client_id=_env("GOOGLE_CLIENT_ID", ""),
        facebook_graph_base=_env("FACEBOOK_GRAPH_BASE", "https://graph.facebook.com/v19.0"),
        facebook_app_secret=_env("FACEBOOK_APP_SECRET", ""),
        stripe_secret_key=_env("STRIPE_SECRET_KEY", ""),
        stripe_webhook_secret=_env("STRIPE_WEBHOOK_SECRET", ""),
        stripe_currency=_env("STRIPE_CURRENCY", "brl"),
        mercadopago_access_token=_env("MERCADOPAGO_ACCESS_TOKEN", ""),
        mercadopago_webhook_secret=_env("MERCADOPAGO_WEBHOOK_SECRET", ""),
        mercadopago_api_base=_env("MERCADOPAGO_API_BASE", "https://api.mercadopago.com"),
        mercadopago_notification_url=_env("MERCADOPAGO_NOTIFICATION_URL", ""),
        mercadopago_pix_expiration_minutes=int(_env("MERCADOPAGO_PIX_EXPIRATION_MINUTES", "30")),
        provider_timeout_seconds=float(_env("PROVIDER_TIMEOUT_SECONDS", "10")),
        gemini_api_key=_env("GEMINI_API_KEY", ""),
        gemini_api_base=_env("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"),
        gemini_timeout_seconds=float(_env("GEMINI_TIMEOUT_SECONDS", "60")),
        cors_origins=_csv("CORS_ORIGINS", "*"),
        log_level=_env("LOG_LEVEL", "INFO"),
    )
