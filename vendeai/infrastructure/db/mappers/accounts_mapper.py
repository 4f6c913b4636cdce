from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from vendeai.domain.entities.subscription import Subscription
from vendeai.domain.entities.user import AuthIdentity, AuthSession, User


def _as_str(value: Any) -> str:
    return str(value)


def _as_datetime(value: Any) -> datetime | None:
    # SQLite hands back naive datetimes or ISO strings; PostgreSQL returns aware values.
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=_as_str(row["id"]),
        name=row["name"],
        email=row["email"],
        email_verified=bool(row["email_verified"]),
        is_active=bool(row["is_active"]),
        avatar_url=row.get("avatar_url"),
        locale=row.get("locale") or "pt",
        created_at=_as_datetime(row["created_at"]),
        updated_at=_as_datetime(row["updated_at"]),
    )


def map_row_to_auth_identity(row: Mapping[str, Any]) -> AuthIdentity:
    return AuthIdentity(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        provider=row["provider"],
        provider_subject=row.get("provider_subject"),
        password_hash=row.get("password_hash"),
        created_at=_as_datetime(row["created_at"]),
    )


def map_row_to_auth_session(row: Mapping[str, Any]) -> AuthSession:
    return AuthSession(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        token_hash=row["token_hash"],
        expires_at=_as_datetime(row["expires_at"]),
        user_agent=row.get("user_agent"),
        ip=row.get("ip"),
        created_at=_as_datetime(row["created_at"]),
    )


def map_row_to_subscription(row: Mapping[str, Any]) -> Subscription:
    return Subscription(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        plan_code=row["plan_code"],
        status=row["status"],
        current_period_start=_as_datetime(row.get("current_period_start")),
        current_period_end=_as_datetime(row.get("current_period_end")),
        canceled_at=_as_datetime(row.get("canceled_at")),
        card_payment_ref=row.get("card_payment_ref"),
        async_payment_ref=row.get("async_payment_ref"),
        ai_uses_count=int(row["ai_uses_count"] or 0),
        created_at=_as_datetime(row["created_at"]),
        updated_at=_as_datetime(row["updated_at"]),
    )
