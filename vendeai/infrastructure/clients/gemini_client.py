from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from vendeai.application.dto.ai import AiCompletionRequest
from vendeai.application.ports.ai_completion_port import AiCompletionPort
from vendeai.domain.exceptions import AiProviderError


logger = logging.getLogger(__name__)


class GeminiClient(AiCompletionPort):
    """``generateContent`` over the Gemini REST API. Failures are never retried here."""

    def __init__(
        self,
        *,
        api_key: str,
        api_base: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds: float = 60,
        http_client: httpx.Client | None = None,
    ):
        self._api_key = api_key
        self._api_base = api_base.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client

    def complete(self, request: AiCompletionRequest) -> Any:
        parts: list[dict] = []
        if request.image_base64:
            parts.append(
                {
                    "inlineData": {
                        "mimeType": request.image_mime_type or "image/jpeg",
                        "data": request.image_base64,
                    }
                }
            )
        parts.append({"text": request.prompt})

        body: dict = {"contents": [{"role": "user", "parts": parts}]}
        if request.response_schema is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": request.response_schema,
            }

        url = f"{self._api_base}/models/{request.model}:generateContent"
        try:
            payload = self._post(url, body)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("gemini_client: request_failed model=%s error=%s", request.model, exc)
            raise AiProviderError("AI provider unavailable. Try again later.") from exc

        text = _extract_text(payload)
        if text is None:
            raise AiProviderError("AI provider returned an empty response.")
        if request.response_schema is None:
            return text

        try:
            return json.loads(text.strip())
        except ValueError as exc:
            logger.warning("gemini_client: malformed_json model=%s", request.model)
            raise AiProviderError("A resposta da IA nao estava no formato JSON esperado.") from exc

    def _post(self, url: str, body: dict) -> dict:
        headers = {"x-goog-api-key": self._api_key}
        if self._http_client is not None:
            response = self._http_client.post(url, json=body, headers=headers, timeout=self._timeout_seconds)
            response.raise_for_status()
            return response.json()
        with httpx.Client(timeout=self._timeout_seconds) as client:
            response = client.post(url, json=body, headers=headers)
            response.raise_for_status()
            return response.json()


def _extract_text(payload: dict) -> str | None:
    candidates = payload.get("candidates") or []
    if not candidates:
        return None
    parts = (candidates[0].get("content") or {}).get("parts") or []
    texts = [part["text"] for part in parts if isinstance(part.get("text"), str)]
    if not texts:
        return None
    return "".join(texts)
