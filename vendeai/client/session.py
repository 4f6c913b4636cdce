from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx


logger = logging.getLogger(__name__)


class VendeAiClientError(RuntimeError):
    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail

    @property
    def requires_login(self) -> bool:
        return self.status_code == 401


@dataclass(frozen=True)
class EntitlementSnapshot:
    plan_code: str
    status: str
    ai_uses: int
    remaining_ai_uses: int | str
    capabilities: tuple[str, ...]

    @property
    def can_use_ai(self) -> bool:
        return self.remaining_ai_uses == "unlimited" or int(self.remaining_ai_uses) > 0

    def has_capability(self, feature_code: str) -> bool:
        return feature_code in self.capabilities


class VendeAiClient:
    """Session holder for app front-ends.

    The entitlement snapshot is only ever replaced by a server read: once when
    the session is established and again after every mutating call. Quota
    fields are never adjusted locally.
    """

    def __init__(self, *, base_url: str = "", http_client: httpx.Client | None = None, timeout_seconds: float = 15):
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout_seconds)
        self._session_token: str | None = None
        self._user: dict | None = None
        self._entitlements: EntitlementSnapshot | None = None

    @property
    def is_authenticated(self) -> bool:
        return self._session_token is not None

    @property
    def user(self) -> dict | None:
        return self._user

    @property
    def entitlements(self) -> EntitlementSnapshot | None:
        return self._entitlements

    # Session lifecycle

    def register(self, *, name: str, email: str, password: str) -> EntitlementSnapshot:
        payload = self._request("POST", "/v1/auth/register", json={"name": name, "email": email, "password": password})
        return self._establish(payload)

    def login(self, *, email: str, password: str) -> EntitlementSnapshot:
        payload = self._request("POST", "/v1/auth/login", json={"email": email, "password": password})
        return self._establish(payload)

    def login_oauth(self, *, provider: str, token: str) -> EntitlementSnapshot:
        payload = self._request("POST", f"/v1/auth/oauth/{provider}", json={"token": token})
        return self._establish(payload)

    def logout(self) -> None:
        if self._session_token is None:
            return
        try:
            self._request("POST", "/v1/auth/logout")
        except VendeAiClientError as exc:
            if not exc.requires_login:
                raise
        finally:
            self._clear()

    def refresh(self) -> EntitlementSnapshot:
        payload = self._request("GET", "/v1/entitlements")
        self._entitlements = EntitlementSnapshot(
            plan_code=payload["plan_code"],
            status=payload["status"],
            ai_uses=int(payload["ai_uses"]),
            remaining_ai_uses=payload["remaining_ai_uses"],
            capabilities=tuple(payload.get("capabilities") or ()),
        )
        return self._entitlements

    # Quota-gated calls

    def attempt_ai_use(self) -> bool:
        decision = self._mutate("POST", "/v1/ai/uses")
        return bool(decision["allowed"])

    def run_ai_action(self, action: str, **params: Any) -> dict:
        return self._mutate("POST", f"/v1/ai/{action}", json={"params": params})

    # Billing

    def create_card_intent(self, *, plan_code: str, interval: str = "month") -> dict:
        return self._request("POST", "/v1/billing/card/intents", json={"plan_code": plan_code, "interval": interval})

    def confirm_card_payment(self, *, payment_intent_id: str) -> dict:
        return self._mutate("POST", "/v1/billing/card/confirm", json={"payment_intent_id": payment_intent_id})

    def create_pix_payment(self, *, plan_code: str, interval: str = "month") -> dict:
        return self._request("POST", "/v1/billing/pix", json={"plan_code": plan_code, "interval": interval})

    def confirm_pix_payment(self, *, payment_id: str) -> dict:
        return self._mutate("POST", f"/v1/billing/pix/{payment_id}/confirm")

    def cancel_subscription(self) -> dict:
        return self._mutate("POST", "/v1/billing/subscription/cancel")

    # Internals

    def _establish(self, payload: dict) -> EntitlementSnapshot:
        self._session_token = payload["session_token"]
        self._user = payload.get("user")
        logger.debug("client: session_established user_id=%s", (self._user or {}).get("id"))
        return self.refresh()

    def _mutate(self, method: str, path: str, **kwargs) -> dict:
        try:
            return self._request(method, path, **kwargs)
        finally:
            if self._session_token is not None:
                self.refresh()

    def _request(self, method: str, path: str, **kwargs) -> dict:
        headers = dict(kwargs.pop("headers", {}) or {})
        if self._session_token:
            headers["Authorization"] = f"Bearer {self._session_token}"
        response = self._http.request(method, path, headers=headers, **kwargs)
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = body.get("detail", response.text) if isinstance(body, dict) else response.text
            if response.status_code == 401:
                self._clear()
            raise VendeAiClientError(response.status_code, str(detail))
        return response.json()

    def _clear(self) -> None:
        self._session_token = None
        self._user = None
        self._entitlements = None
