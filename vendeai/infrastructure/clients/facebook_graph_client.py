from __future__ import annotations

import hashlib
import hmac
import logging

import httpx

from vendeai.application.dto.auth import OAuthIdentityInfo
from vendeai.application.ports.oauth_port import OAuthIdentityPort
from vendeai.domain.exceptions import OAuthTokenValidationError


logger = logging.getLogger(__name__)

PROFILE_FIELDS = "id,name,email,picture.type(large)"


class FacebookGraphClient(OAuthIdentityPort):
    """Validates a Facebook user access token by reading ``/me`` with it.

    Accounts without a shared email get a placeholder ``<id>@facebook.com``
    address that is never treated as verified.
    """

    def __init__(
        self,
        *,
        graph_base: str = "https://graph.facebook.com/v19.0",
        app_secret: str = "",
        timeout_seconds: float = 10,
        http_client: httpx.Client | None = None,
    ):
        self._graph_base = graph_base.rstrip("/")
        self._app_secret = app_secret
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client

    def verify_token(self, *, token: str) -> OAuthIdentityInfo:
        params = {"fields": PROFILE_FIELDS, "access_token": token}
        if self._app_secret:
            params["appsecret_proof"] = hmac.new(
                self._app_secret.encode("utf-8"),
                token.encode("utf-8"),
                hashlib.sha256,
            ).hexdigest()

        try:
            payload = self._get(f"{self._graph_base}/me", params=params)
        except httpx.HTTPStatusError as exc:
            logger.info("facebook_graph_client: token_rejected status=%s", exc.response.status_code)
            raise OAuthTokenValidationError("Invalid Facebook access token.") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("facebook_graph_client: graph_unavailable error=%s", exc)
            raise OAuthTokenValidationError("Could not validate Facebook access token.") from exc

        subject = payload.get("id")
        if not subject:
            raise OAuthTokenValidationError("Facebook profile missing id.")

        email = payload.get("email")
        email_verified = bool(email)
        if not email:
            email = f"{subject}@facebook.com"

        picture = ((payload.get("picture") or {}).get("data") or {}).get("url")
        name = payload.get("name") if isinstance(payload.get("name"), str) else None
        return OAuthIdentityInfo(
            provider="facebook",
            subject=str(subject),
            email=str(email),
            email_verified=email_verified,
            name=name,
            avatar_url=picture if isinstance(picture, str) else None,
        )

    def _get(self, url: str, *, params: dict) -> dict:
        if self._http_client is not None:
            response = self._http_client.get(url, params=params, timeout=self._timeout_seconds)
            response.raise_for_status()
            return response.json()
        with httpx.Client(timeout=self._timeout_seconds) as client:
            response = client.get(url, params=params)
            response.raise_for_status()
            return response.json()
