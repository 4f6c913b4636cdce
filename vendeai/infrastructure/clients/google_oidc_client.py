from __future__ import annotations

import logging

from google.auth import exceptions as google_auth_exceptions
from google.auth.transport import requests
from google.oauth2 import id_token

from vendeai.application.dto.auth import OAuthIdentityInfo
from vendeai.application.ports.oauth_port import OAuthIdentityPort
from vendeai.domain.exceptions import OAuthTokenValidationError


logger = logging.getLogger(__name__)


class GoogleOidcClient(OAuthIdentityPort):
    def __init__(self, *, client_id: str):
        self._client_id = client_id

    def verify_token(self, *, token: str) -> OAuthIdentityInfo:
        try:
            payload = id_token_verify(token=token, audience=self._client_id)
        except (ValueError, google_auth_exceptions.GoogleAuthError) as exc:
            logger.info("google_oidc_client: id_token_rejected error=%s", exc)
            raise OAuthTokenValidationError("Invalid Google id_token.") from exc

        email = payload.get("email")
        subject = payload.get("sub")
        if not email or not subject:
            raise OAuthTokenValidationError("Google id_token missing required claims.")

        email_verified_raw = payload.get("email_verified", False)
        email_verified = bool(email_verified_raw)
        if isinstance(email_verified_raw, str):
            email_verified = email_verified_raw.lower() == "true"

        name = payload.get("name") if isinstance(payload.get("name"), str) else None
        picture = payload.get("picture") if isinstance(payload.get("picture"), str) else None
        return OAuthIdentityInfo(
            provider="google",
            subject=str(subject),
            email=str(email),
            email_verified=email_verified,
            name=name,
            avatar_url=picture,
        )


def id_token_verify(*, token: str, audience: str) -> dict:
    request = requests.Request()
    return id_token.verify_oauth2_token(token, request, audience)
