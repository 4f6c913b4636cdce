from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, TypeVar
from uuid import uuid4

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from vendeai.application.ports.accounts_port import AccountsPort
from vendeai.domain.exceptions import EmailAlreadyExistsError
from vendeai.infrastructure.db.mappers.accounts_mapper import (
    map_row_to_auth_identity,
    map_row_to_auth_session,
    map_row_to_subscription,
    map_row_to_user,
)


T = TypeVar("T")

_USER_COLUMNS = "id, name, email, email_verified, is_active, avatar_url, locale, created_at, updated_at"
_IDENTITY_COLUMNS = "id, user_id, provider, provider_subject, password_hash, created_at"
_SESSION_COLUMNS = "id, user_id, token_hash, expires_at, user_agent, ip, created_at"
_SUBSCRIPTION_COLUMNS = (
    "id, user_id, plan_code, status, current_period_start, current_period_end, canceled_at, "
    "card_payment_ref, async_payment_ref, ai_uses_count, created_at, updated_at"
)


class SqlAccountsRepository(AccountsPort):
    """Users, identities, sessions and subscriptions over raw SQL.

    Statements run on their own connection unless the repository was handed
    one by ``execute_in_transaction``.
    """

    def __init__(self, engine: Engine, connection: Connection | None = None):
        self._engine = engine
        self._connection = connection

    @contextmanager
    def _read(self) -> Iterator[Connection]:
        if self._connection is not None:
            yield self._connection
            return
        with self._engine.connect() as conn:
            yield conn

    @contextmanager
    def _write(self) -> Iterator[Connection]:
        if self._connection is not None:
            yield self._connection
            return
        with self._engine.begin() as conn:
            yield conn

    def execute_in_transaction(self, fn: Callable[[AccountsPort], T]) -> T:
        if self._connection is not None:
            return fn(self)
        with self._engine.begin() as conn:
            return fn(SqlAccountsRepository(self._engine, connection=conn))

    # Users

    def get_user_by_id(self, *, user_id: str):
        sql = f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE id = :user_id
            LIMIT 1
        """
        with self._read() as conn:
            row = conn.execute(text(sql), {"user_id": user_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_user_by_email(self, *, email: str):
        sql = f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE lower(email) = :email
            LIMIT 1
        """
        with self._read() as conn:
            row = conn.execute(text(sql), {"email": email.lower()}).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

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
    ):
        sql = f"""
            INSERT INTO users (
                id, name, email, email_verified, is_active, avatar_url, locale, created_at, updated_at
            ) VALUES (
                :id, :name, :email, :email_verified, :is_active, :avatar_url, :locale, :created_at, :updated_at
            )
            RETURNING {_USER_COLUMNS}
        """
        params = {
            "id": user_id,
            "name": name,
            "email": email,
            "email_verified": email_verified,
            "is_active": is_active,
            "avatar_url": avatar_url,
            "locale": locale,
            "created_at": created_at,
            "updated_at": updated_at,
        }
        # users.email is unique; a concurrent registration loses here.
        try:
            with self._write() as conn:
                row = conn.execute(text(sql), params).mappings().one()
        except IntegrityError as exc:
            raise EmailAlreadyExistsError("Email already in use.") from exc
        return map_row_to_user(row)

    def update_user_email_verified(self, *, user_id: str, email_verified: bool) -> None:
        sql = """
            UPDATE users
            SET email_verified = :email_verified,
                updated_at = :updated_at
            WHERE id = :user_id
        """
        with self._write() as conn:
            conn.execute(
                text(sql),
                {
                    "user_id": user_id,
                    "email_verified": email_verified,
                    "updated_at": _utcnow(),
                },
            )

    def update_user_profile(
        self,
        *,
        user_id: str,
        name: str,
        avatar_url: str | None,
        locale: str,
        updated_at: datetime,
    ):
        sql = f"""
            UPDATE users
            SET name = :name,
                avatar_url = :avatar_url,
                locale = :locale,
                updated_at = :updated_at
            WHERE id = :user_id
            RETURNING {_USER_COLUMNS}
        """
        with self._write() as conn:
            row = conn.execute(
                text(sql),
                {
                    "user_id": user_id,
                    "name": name,
                    "avatar_url": avatar_url,
                    "locale": locale,
                    "updated_at": updated_at,
                },
            ).mappings().one()
        return map_row_to_user(row)

    # Identities

    def create_identity(
        self,
        *,
        identity_id: str,
        user_id: str,
        provider: str,
        provider_subject: str | None,
        password_hash: str | None,
        created_at: datetime,
    ):
        sql = f"""
            INSERT INTO auth_identities (
                id, user_id, provider, provider_subject, password_hash, created_at
            ) VALUES (
                :id, :user_id, :provider, :provider_subject, :password_hash, :created_at
            )
            RETURNING {_IDENTITY_COLUMNS}
        """
        with self._write() as conn:
            row = conn.execute(
                text(sql),
                {
                    "id": identity_id,
                    "user_id": user_id,
                    "provider": provider,
                    "provider_subject": provider_subject,
                    "password_hash": password_hash,
                    "created_at": created_at,
                },
            ).mappings().one()
        return map_row_to_auth_identity(row)

    def get_identity_for_user_provider(self, *, user_id: str, provider: str):
        sql = f"""
            SELECT {_IDENTITY_COLUMNS}
            FROM auth_identities
            WHERE user_id = :user_id
              AND provider = :provider
            LIMIT 1
        """
        with self._read() as conn:
            row = conn.execute(
                text(sql),
                {
                    "user_id": user_id,
                    "provider": provider,
                },
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_auth_identity(row)

    def get_identity_by_provider_subject(self, *, provider: str, provider_subject: str):
        sql = f"""
            SELECT {_IDENTITY_COLUMNS}
            FROM auth_identities
            WHERE provider = :provider
              AND provider_subject = :provider_subject
            LIMIT 1
        """
        with self._read() as conn:
            row = conn.execute(
                text(sql),
                {
                    "provider": provider,
                    "provider_subject": provider_subject,
                },
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_auth_identity(row)

    def update_identity_provider_subject(self, *, identity_id: str, provider_subject: str) -> None:
        sql = """
            UPDATE auth_identities
            SET provider_subject = :provider_subject
            WHERE id = :identity_id
        """
        with self._write() as conn:
            conn.execute(text(sql), {"identity_id": identity_id, "provider_subject": provider_subject})

    def update_identity_password_hash(self, *, identity_id: str, password_hash: str) -> None:
        sql = """
            UPDATE auth_identities
            SET password_hash = :password_hash
            WHERE id = :identity_id
        """
        with self._write() as conn:
            conn.execute(text(sql), {"identity_id": identity_id, "password_hash": password_hash})

    def get_local_identity_by_email(self, *, email: str):
        sql = """
            SELECT
                u.id AS user_id,
                u.name,
                u.email,
                u.email_verified,
                u.is_active,
                u.avatar_url,
                u.locale,
                u.created_at AS user_created_at,
                u.updated_at AS user_updated_at,
                i.id AS identity_id,
                i.provider,
                i.provider_subject,
                i.password_hash,
                i.created_at AS identity_created_at
            FROM users u
            JOIN auth_identities i
              ON i.user_id = u.id
            WHERE lower(u.email) = :email
              AND i.provider = 'local'
            LIMIT 1
        """
        with self._read() as conn:
            row = conn.execute(text(sql), {"email": email.lower()}).mappings().first()
        if row is None:
            return None

        user = map_row_to_user(
            {
                "id": row["user_id"],
                "name": row["name"],
                "email": row["email"],
                "email_verified": row["email_verified"],
                "is_active": row["is_active"],
                "avatar_url": row["avatar_url"],
                "locale": row["locale"],
                "created_at": row["user_created_at"],
                "updated_at": row["user_updated_at"],
            }
        )
        identity = map_row_to_auth_identity(
            {
                "id": row["identity_id"],
                "user_id": row["user_id"],
                "provider": row["provider"],
                "provider_subject": row["provider_subject"],
                "password_hash": row["password_hash"],
                "created_at": row["identity_created_at"],
            }
        )
        return user, identity

    # Sessions

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
    ):
        sql = f"""
            INSERT INTO auth_sessions (
                id, user_id, token_hash, expires_at, user_agent, ip, created_at
            ) VALUES (
                :id, :user_id, :token_hash, :expires_at, :user_agent, :ip, :created_at
            )
            RETURNING {_SESSION_COLUMNS}
        """
        with self._write() as conn:
            row = conn.execute(
                text(sql),
                {
                    "id": session_id,
                    "user_id": user_id,
                    "token_hash": token_hash,
                    "expires_at": expires_at,
                    "user_agent": user_agent,
                    "ip": ip,
                    "created_at": created_at,
                },
            ).mappings().one()
        return map_row_to_auth_session(row)

    def get_session_by_id(self, *, session_id: str):
        sql = f"""
            SELECT {_SESSION_COLUMNS}
            FROM auth_sessions
            WHERE id = :session_id
            LIMIT 1
        """
        with self._read() as conn:
            row = conn.execute(text(sql), {"session_id": session_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_auth_session(row)

    def delete_session_by_token_hash(self, *, token_hash: str) -> bool:
        sql = """
            DELETE FROM auth_sessions
            WHERE token_hash = :token_hash
        """
        with self._write() as conn:
            result = conn.execute(text(sql), {"token_hash": token_hash})
        return result.rowcount > 0

    # Subscriptions

    def get_subscription_for_user(self, *, user_id: str):
        sql = f"""
            SELECT {_SUBSCRIPTION_COLUMNS}
            FROM subscriptions
            WHERE user_id = :user_id
            LIMIT 1
        """
        with self._read() as conn:
            row = conn.execute(text(sql), {"user_id": user_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_subscription(row)

    def ensure_subscription(self, *, user_id: str, plan_code: str, now: datetime):
        insert_sql = """
            INSERT INTO subscriptions (
                id, user_id, plan_code, status, ai_uses_count, created_at, updated_at
            ) VALUES (
                :id, :user_id, :plan_code, 'active', 0, :created_at, :updated_at
            )
            ON CONFLICT (user_id) DO NOTHING
        """
        select_sql = f"""
            SELECT {_SUBSCRIPTION_COLUMNS}
            FROM subscriptions
            WHERE user_id = :user_id
        """
        with self._write() as conn:
            conn.execute(
                text(insert_sql),
                {
                    "id": str(uuid4()),
                    "user_id": user_id,
                    "plan_code": plan_code,
                    "created_at": now,
                    "updated_at": now,
                },
            )
            row = conn.execute(text(select_sql), {"user_id": user_id}).mappings().one()
        return map_row_to_subscription(row)

    def upsert_confirmed_payment(
        self,
        *,
        user_id: str,
        plan_code: str,
        card_payment_ref: str | None,
        async_payment_ref: str | None,
        period_start: datetime,
        period_end: datetime,
        now: datetime,
    ):
        # A reference is applied at most once, whatever was paid after it.
        claim_sql = """
            INSERT INTO applied_payments (id, rail, external_ref, user_id, plan_code, applied_at)
            VALUES (:id, :rail, :external_ref, :user_id, :plan_code, :applied_at)
            ON CONFLICT (rail, external_ref) DO NOTHING
            RETURNING id
        """
        # The counter survives only a same-plan payment inside a live paid period.
        upsert_sql = f"""
            INSERT INTO subscriptions (
                id,
                user_id,
                plan_code,
                status,
                current_period_start,
                current_period_end,
                canceled_at,
                card_payment_ref,
                async_payment_ref,
                ai_uses_count,
                created_at,
                updated_at
            ) VALUES (
                :id,
                :user_id,
                :plan_code,
                'active',
                :period_start,
                :period_end,
                NULL,
                :card_payment_ref,
                :async_payment_ref,
                0,
                :now,
                :now
            )
            ON CONFLICT (user_id) DO UPDATE
            SET plan_code = excluded.plan_code,
                status = 'active',
                current_period_start = excluded.current_period_start,
                current_period_end = excluded.current_period_end,
                canceled_at = NULL,
                card_payment_ref = excluded.card_payment_ref,
                async_payment_ref = excluded.async_payment_ref,
                ai_uses_count = CASE
                    WHEN subscriptions.plan_code = excluded.plan_code
                     AND subscriptions.status = 'active'
                     AND subscriptions.current_period_end > excluded.updated_at
                    THEN subscriptions.ai_uses_count
                    ELSE 0
                END,
                updated_at = excluded.updated_at
            RETURNING {_SUBSCRIPTION_COLUMNS}
        """
        select_sql = f"""
            SELECT {_SUBSCRIPTION_COLUMNS}
            FROM subscriptions
            WHERE user_id = :user_id
        """
        rail = "card" if card_payment_ref is not None else "async"
        external_ref = card_payment_ref if card_payment_ref is not None else async_payment_ref
        with self._write() as conn:
            claimed = conn.execute(
                text(claim_sql),
                {
                    "id": str(uuid4()),
                    "rail": rail,
                    "external_ref": external_ref,
                    "user_id": user_id,
                    "plan_code": plan_code,
                    "applied_at": now,
                },
            ).first()
            if claimed is None:
                existing = conn.execute(text(select_sql), {"user_id": user_id}).mappings().one()
                return map_row_to_subscription(existing), False
            row = conn.execute(
                text(upsert_sql),
                {
                    "id": str(uuid4()),
                    "user_id": user_id,
                    "plan_code": plan_code,
                    "period_start": period_start,
                    "period_end": period_end,
                    "card_payment_ref": card_payment_ref,
                    "async_payment_ref": async_payment_ref,
                    "now": now,
                },
            ).mappings().one()
        return map_row_to_subscription(row), True

    def try_increment_ai_uses(self, *, user_id: str, plan_code: str, quota: int | None):
        if quota is None:
            sql = """
                UPDATE subscriptions
                SET ai_uses_count = ai_uses_count + 1,
                    updated_at = :updated_at
                WHERE user_id = :user_id
                  AND plan_code = :plan_code
                RETURNING ai_uses_count
            """
        else:
            sql = """
                UPDATE subscriptions
                SET ai_uses_count = ai_uses_count + 1,
                    updated_at = :updated_at
                WHERE user_id = :user_id
                  AND plan_code = :plan_code
                  AND ai_uses_count < :quota
                RETURNING ai_uses_count
            """
        params = {"user_id": user_id, "plan_code": plan_code, "updated_at": _utcnow()}
        if quota is not None:
            params["quota"] = quota
        with self._write() as conn:
            row = conn.execute(text(sql), params).mappings().first()
        if row is None:
            return None
        return int(row["ai_uses_count"])

    def cancel_subscription(self, *, user_id: str, canceled_at: datetime):
        sql = f"""
            UPDATE subscriptions
            SET status = 'canceled',
                canceled_at = :canceled_at,
                updated_at = :canceled_at
            WHERE user_id = :user_id
            RETURNING {_SUBSCRIPTION_COLUMNS}
        """
        with self._write() as conn:
            row = conn.execute(text(sql), {"user_id": user_id, "canceled_at": canceled_at}).mappings().first()
        if row is None:
            return None
        return map_row_to_subscription(row)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
