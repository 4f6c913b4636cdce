from __future__ import annotations

import hashlib
import hmac
import logging
import time
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import httpx

from vendeai.application.dto.billing import MercadoPagoPixResult, MercadoPagoWebhookEvent
from vendeai.application.ports.mercadopago_port import MercadoPagoPort
from vendeai.domain.entities.payment import AsyncPaymentSnapshot
from vendeai.domain.exceptions import BillingProviderError, InvalidReferenceError, WebhookSignatureError


logger = logging.getLogger(__name__)

READ_ATTEMPTS = 2


class MercadoPagoClient(MercadoPagoPort):
    """PIX payments over the Mercado Pago REST API."""

    def __init__(
        self,
        *,
        access_token: str,
        webhook_secret: str,
        api_base: str = "https://api.mercadopago.com",
        notification_url: str | None = None,
        pix_expiration_minutes: int = 30,
        timeout_seconds: float = 10,
        http_client: httpx.Client | None = None,
    ):
        self._access_token = access_token
        self._webhook_secret = webhook_secret
        self._api_base = api_base.rstrip("/")
        self._notification_url = notification_url
        self._pix_expiration_minutes = pix_expiration_minutes
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client

    def create_pix_payment(
        self,
        *,
        amount: Decimal,
        description: str,
        external_reference: str,
        payer_email: str,
        payer_name: str,
    ) -> MercadoPagoPixResult:
        expires_at = datetime.now(timezone.utc) + timedelta(minutes=self._pix_expiration_minutes)
        body = {
            "transaction_amount": float(amount),
            "description": description,
            "payment_method_id": "pix",
            "external_reference": external_reference,
            "date_of_expiration": expires_at.isoformat(timespec="milliseconds"),
            "payer": {"email": payer_email, "first_name": payer_name},
        }
        if self._notification_url:
            body["notification_url"] = self._notification_url

        # The idempotency key makes an accidental resend harmless; the call itself is not retried.
        headers = {"X-Idempotency-Key": str(uuid.uuid4())}
        try:
            payload = self._request("POST", "/v1/payments", json=body, headers=headers)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("mercadopago_client: create_pix_failed ref=%s error=%s", external_reference, exc)
            raise BillingProviderError("Failed to create PIX payment.") from exc

        payment_id = payload.get("id")
        if payment_id is None:
            raise BillingProviderError("Mercado Pago payment response is incomplete.")

        transaction_data = (payload.get("point_of_interaction") or {}).get("transaction_data") or {}
        return MercadoPagoPixResult(
            payment_id=str(payment_id),
            status=str(payload.get("status") or "pending"),
            qr_code=transaction_data.get("qr_code"),
            qr_code_base64=transaction_data.get("qr_code_base64"),
            expires_at=_parse_datetime(payload.get("date_of_expiration")) or expires_at,
        )

    def get_payment(self, *, payment_id: str) -> AsyncPaymentSnapshot:
        delay = 0.25
        last_exc: Exception | None = None
        for attempt in range(1, READ_ATTEMPTS + 1):
            try:
                payload = self._request("GET", f"/v1/payments/{payment_id}")
                break
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code == 404:
                    raise InvalidReferenceError(f"Unknown payment '{payment_id}'.") from exc
                if exc.response.status_code < 500:
                    raise BillingProviderError("Failed to read PIX payment.") from exc
                last_exc = exc
            except (httpx.TransportError, ValueError) as exc:
                last_exc = exc
            if attempt < READ_ATTEMPTS:
                logger.warning(
                    "mercadopago_client: get_payment_retry attempt=%s/%s payment_id=%s error=%s",
                    attempt,
                    READ_ATTEMPTS,
                    payment_id,
                    last_exc,
                )
                time.sleep(delay)
        else:
            raise BillingProviderError("Mercado Pago is unavailable. Try again later.") from last_exc

        return AsyncPaymentSnapshot(
            payment_id=str(payload.get("id", payment_id)),
            status=str(payload.get("status") or ""),
            status_detail=payload.get("status_detail"),
            external_reference=payload.get("external_reference"),
            expires_at=_parse_datetime(payload.get("date_of_expiration")),
            approved_at=_parse_datetime(payload.get("date_approved")),
        )

    def verify_webhook(
        self,
        *,
        signature: str | None,
        request_id: str | None,
        payload: dict,
    ) -> MercadoPagoWebhookEvent:
        data = payload.get("data") or {}
        data_id = data.get("id")
        if not signature or not self._webhook_secret:
            raise WebhookSignatureError("Missing Mercado Pago signature.")

        parts = dict(
            item.strip().split("=", 1) for item in signature.split(",") if "=" in item
        )
        ts = parts.get("ts")
        received = parts.get("v1")
        if not ts or not received:
            raise WebhookSignatureError("Malformed Mercado Pago signature.")

        manifest = ""
        if data_id is not None:
            manifest += f"id:{str(data_id).lower()};"
        if request_id:
            manifest += f"request-id:{request_id};"
        manifest += f"ts:{ts};"
        expected = hmac.new(
            self._webhook_secret.encode("utf-8"),
            manifest.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        if not hmac.compare_digest(expected, received):
            raise WebhookSignatureError("Invalid Mercado Pago signature.")

        return MercadoPagoWebhookEvent(
            event_type=str(payload.get("type") or payload.get("topic") or ""),
            payment_id=str(data_id) if data_id is not None else None,
            status=data.get("status"),
        )

    def _request(self, method: str, path: str, **kwargs) -> dict:
        headers = {"Authorization": f"Bearer {self._access_token}", **kwargs.pop("headers", {})}
        url = f"{self._api_base}{path}"
        if self._http_client is not None:
            response = self._http_client.request(
                method, url, headers=headers, timeout=self._timeout_seconds, **kwargs
            )
            response.raise_for_status()
            return response.json()
        with httpx.Client(timeout=self._timeout_seconds) as client:
            response = client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
            return response.json()


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
