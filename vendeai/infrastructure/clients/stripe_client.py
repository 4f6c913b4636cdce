from __future__ import annotations

import json
import logging

import stripe

from vendeai.application.dto.billing import StripePaymentIntentResult, StripeWebhookEvent
from vendeai.application.ports.stripe_port import StripePort
from vendeai.domain.entities.payment import CardPaymentSnapshot
from vendeai.domain.exceptions import BillingProviderError, InvalidReferenceError, WebhookSignatureError


logger = logging.getLogger(__name__)

# Reads are idempotent and get one more attempt; creates and cancels never do.
READ_ATTEMPTS = 2


class StripeClient(StripePort):
    def __init__(self, *, secret_key: str, webhook_secret: str, timeout_seconds: float = 10):
        stripe.api_key = secret_key
        stripe.max_network_retries = 0
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout_seconds)
        self._webhook_secret = webhook_secret

    def create_payment_intent(
        self,
        *,
        user_id: str,
        plan_code: str,
        amount_cents: int,
        currency: str,
    ) -> StripePaymentIntentResult:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_cents,
                currency=currency,
                automatic_payment_methods={"enabled": True},
                metadata={"userId": user_id, "planId": plan_code, "type": "subscription"},
            )
        except stripe.StripeError as exc:
            logger.warning("stripe_client: create_intent_failed user_id=%s error=%s", user_id, exc)
            raise BillingProviderError("Failed to create Stripe payment intent.") from exc

        intent_id = getattr(intent, "id", None)
        client_secret = getattr(intent, "client_secret", None)
        if not intent_id or not client_secret:
            raise BillingProviderError("Stripe payment intent response is incomplete.")

        return StripePaymentIntentResult(
            id=str(intent_id),
            client_secret=str(client_secret),
            amount_cents=int(getattr(intent, "amount", amount_cents)),
            currency=str(getattr(intent, "currency", currency)),
        )

    def retrieve_payment_intent(self, *, payment_intent_id: str) -> CardPaymentSnapshot:
        last_exc: Exception | None = None
        for attempt in range(1, READ_ATTEMPTS + 1):
            try:
                intent = stripe.PaymentIntent.retrieve(payment_intent_id)
                break
            except stripe.InvalidRequestError as exc:
                raise InvalidReferenceError(f"Unknown payment intent '{payment_intent_id}'.") from exc
            except stripe.APIConnectionError as exc:
                last_exc = exc
                logger.warning(
                    "stripe_client: retrieve_retry attempt=%s/%s intent_id=%s error=%s",
                    attempt,
                    READ_ATTEMPTS,
                    payment_intent_id,
                    exc,
                )
            except stripe.StripeError as exc:
                raise BillingProviderError("Failed to retrieve Stripe payment intent.") from exc
        else:
            raise BillingProviderError("Stripe is unavailable. Try again later.") from last_exc

        metadata = getattr(intent, "metadata", None) or {}
        return CardPaymentSnapshot(
            payment_intent_id=str(intent.id),
            status=str(intent.status),
            user_id=_field(metadata, "userId"),
            plan_code=_field(metadata, "planId"),
        )

    def cancel_payment_intent(self, *, payment_intent_id: str) -> None:
        try:
            stripe.PaymentIntent.cancel(payment_intent_id)
        except stripe.StripeError as exc:
            raise BillingProviderError("Failed to cancel Stripe payment intent.") from exc

    def verify_webhook(self, *, signature: str, payload: bytes) -> StripeWebhookEvent:
        try:
            stripe.WebhookSignature.verify_header(payload.decode("utf-8"), signature, self._webhook_secret)
            event = json.loads(payload)
        except (stripe.SignatureVerificationError, ValueError) as exc:
            raise WebhookSignatureError("Invalid Stripe webhook signature.") from exc

        event_type = str(event.get("type", ""))
        data_object = (event.get("data") or {}).get("object") or {}
        payment_intent_id = None
        if data_object.get("object") == "payment_intent":
            payment_intent_id = data_object.get("id")

        return StripeWebhookEvent(
            event_id=str(event.get("id", "")),
            event_type=event_type,
            payment_intent_id=payment_intent_id,
        )


def _field(obj, key: str) -> str | None:
    try:
        value = obj[key]
    except (KeyError, TypeError):
        return None
    return str(value) if value else None
