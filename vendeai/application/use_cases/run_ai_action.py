from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from vendeai.application.dto.ai import AiCompletionRequest, RunAiActionInput, RunAiActionOutput
from vendeai.application.ports.ai_completion_port import AiCompletionPort
from vendeai.application.use_cases.attempt_ai_use import AttemptAiUseUseCase
from vendeai.application.use_cases.get_user_entitlements import GetUserEntitlementsUseCase
from vendeai.domain.entities.feature import (
    AD_GENERATION,
    COMPETITOR_ANALYSIS,
    PRODUCT_ANALYSIS,
    SMART_CHAT,
    TREND_SUGGESTIONS,
)
from vendeai.domain.exceptions import ValidationError
from vendeai.domain.services.entitlements import has_capability


logger = logging.getLogger(__name__)

FAST_MODEL = "gemini-2.5-flash"
DEEP_MODEL = "gemini-2.5-pro"

_PRICE_SUGGESTION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "price": {"type": "STRING", "description": "Suggested price in BRL"},
        "reasoning": {"type": "STRING", "description": "Reasoning for the price"},
    },
    "required": ["price", "reasoning"],
}

PRODUCT_ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "category": {"type": "STRING", "description": "Product category"},
        "marketValue": {"type": "STRING", "description": "Estimated market value in BRL"},
        "targetAudience": {"type": "STRING", "description": "Description of the target audience"},
        "quickSalePrice": _PRICE_SUGGESTION_SCHEMA,
        "maxProfitPrice": _PRICE_SUGGESTION_SCHEMA,
    },
    "required": ["category", "marketValue", "targetAudience", "quickSalePrice", "maxProfitPrice"],
}

_AD_CONTENT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING", "description": "Catchy title for the ad"},
        "body": {"type": "STRING", "description": "Compelling body text for the ad"},
        "hashtags": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Relevant hashtags, without the # symbol",
        },
    },
    "required": ["title", "body", "hashtags"],
}

GENERATED_ADS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "instagram": _AD_CONTENT_SCHEMA,
        "whatsapp": _AD_CONTENT_SCHEMA,
        "shopee": _AD_CONTENT_SCHEMA,
        "mercadoLivre": _AD_CONTENT_SCHEMA,
    },
    "required": ["instagram", "whatsapp", "shopee", "mercadoLivre"],
}

TREND_SUGGESTIONS_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "productName": {"type": "STRING", "description": "Nome do produto em tendencia."},
            "reasoning": {"type": "STRING", "description": "Por que este produto e uma tendencia."},
        },
        "required": ["productName", "reasoning"],
    },
}

COMPETITOR_ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "strengths": {"type": "ARRAY", "items": {"type": "STRING"}},
        "weaknesses": {"type": "ARRAY", "items": {"type": "STRING"}},
        "opportunities": {"type": "ARRAY", "items": {"type": "STRING"}},
        "pricingStrategy": {"type": "STRING"},
        "finalRecommendation": {"type": "STRING"},
    },
    "required": ["strengths", "weaknesses", "opportunities", "pricingStrategy", "finalRecommendation"],
}


@dataclass(frozen=True)
class AiAction:
    name: str
    capability: str
    build_request: Callable[[dict[str, Any]], AiCompletionRequest]


def _require_text(params: dict[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{key}' is required.")
    return value.strip()


def _analyze_product(params: dict[str, Any]) -> AiCompletionRequest:
    description = str(params.get("description") or "").strip()
    image = params.get("image") or None
    if not description and not image:
        raise ValidationError("Provide a description or an image.")
    if image is not None:
        if not isinstance(image, dict) or not image.get("mime_type") or not image.get("data"):
            raise ValidationError("image requires 'mime_type' and 'data'.")
    prompt = (
        "Analise este produto. Com base na descricao e/ou imagem, forneca uma analise detalhada. "
        f'Descricao: "{description}". Responda em Portugues do Brasil.'
    )
    return AiCompletionRequest(
        model=DEEP_MODEL if image else FAST_MODEL,
        prompt=prompt,
        response_schema=PRODUCT_ANALYSIS_SCHEMA,
        image_mime_type=image["mime_type"] if image else None,
        image_base64=image["data"] if image else None,
    )


def _generate_ads(params: dict[str, Any]) -> AiCompletionRequest:
    category = _require_text(params, "category")
    target_audience = _require_text(params, "target_audience")
    price = _require_text(params, "price")
    prompt = (
        "Com base nas informacoes do produto a seguir, gere textos de anuncio otimizados para "
        "Instagram, WhatsApp, Shopee e Mercado Livre. "
        f"Informacoes do produto: Categoria: {category}, Publico-alvo: {target_audience}, "
        f"Preco sugerido: {price}. Responda em Portugues do Brasil."
    )
    return AiCompletionRequest(model=FAST_MODEL, prompt=prompt, response_schema=GENERATED_ADS_SCHEMA)


def _generate_ad_copy(params: dict[str, Any]) -> AiCompletionRequest:
    product_name = _require_text(params, "product_name")
    description = _require_text(params, "description")
    platform = _require_text(params, "platform")
    tone = _require_text(params, "tone")
    try:
        price = float(params.get("price"))
    except (TypeError, ValueError) as exc:
        raise ValidationError("'price' must be a number.") from exc
    prompt = (
        f'Crie um texto de anuncio curto e persuasivo para o produto "{product_name}", '
        f"que custa R${price:.2f}. A descricao fornecida pelo usuario e: \"{description}\". "
        f'O anuncio e para a plataforma "{platform}" e deve ter um tom "{tone}". '
        "Incorpore detalhes da descricao do usuario. Inclua emojis relevantes e uma chamada "
        "para acao clara. Responda em Portugues do Brasil."
    )
    return AiCompletionRequest(model=FAST_MODEL, prompt=prompt, response_schema=None)


def _suggest_trends(params: dict[str, Any]) -> AiCompletionRequest:
    prompt = (
        "Aja como um analista de tendencias de mercado para e-commerce no Brasil. "
        "Sugira 5 produtos que estao em alta e com bom potencial de vendas. Para cada produto, "
        "forneca um nome claro e uma breve justificativa (reasoning) para a tendencia. "
        "Responda em Portugues do Brasil."
    )
    return AiCompletionRequest(model=DEEP_MODEL, prompt=prompt, response_schema=TREND_SUGGESTIONS_SCHEMA)


def _analyze_competitor(params: dict[str, Any]) -> AiCompletionRequest:
    description = _require_text(params, "description")
    prompt = (
        "Aja como um especialista em e-commerce. Analise o seguinte produto ou concorrente "
        f'descrito pelo usuario: "{description}". Forneca uma analise SWOT simplificada '
        "(pontos fortes, fracos, oportunidades), sugira uma estrategia de precificacao e finalize "
        "com uma recomendacao clara para o usuario se destacar no mercado. "
        "Responda em Portugues do Brasil."
    )
    return AiCompletionRequest(model=DEEP_MODEL, prompt=prompt, response_schema=COMPETITOR_ANALYSIS_SCHEMA)


def _chat(params: dict[str, Any]) -> AiCompletionRequest:
    message = _require_text(params, "message")
    prompt = (
        "Voce e um assistente de vendas para pequenos lojistas de e-commerce no Brasil. "
        f'Responda de forma objetiva em Portugues do Brasil a mensagem: "{message}"'
    )
    return AiCompletionRequest(model=FAST_MODEL, prompt=prompt, response_schema=None)


AI_ACTIONS: dict[str, AiAction] = {
    action.name: action
    for action in (
        AiAction("analyze_product", PRODUCT_ANALYSIS, _analyze_product),
        AiAction("generate_ads", AD_GENERATION, _generate_ads),
        AiAction("generate_ad_copy", AD_GENERATION, _generate_ad_copy),
        AiAction("suggest_trends", TREND_SUGGESTIONS, _suggest_trends),
        AiAction("analyze_competitor", COMPETITOR_ANALYSIS, _analyze_competitor),
        AiAction("chat", SMART_CHAT, _chat),
    )
}


def _normalize_trends(result: Any) -> Any:
    # Some responses wrap the list in a single-key object.
    if isinstance(result, dict) and len(result) == 1:
        (value,) = result.values()
        if isinstance(value, list):
            return value
    return result


class RunAiActionUseCase:
    """Run an AI action behind the capability gate and the quota guard.

    Denials come back as values so the caller can show the upgrade path. A use
    consumed before a provider failure is not given back.
    """

    def __init__(
        self,
        *,
        get_user_entitlements_use_case: GetUserEntitlementsUseCase,
        attempt_ai_use_use_case: AttemptAiUseUseCase,
        ai_completion_port: AiCompletionPort,
    ):
        self._get_user_entitlements_use_case = get_user_entitlements_use_case
        self._attempt_ai_use_use_case = attempt_ai_use_use_case
        self._ai_completion_port = ai_completion_port

    def execute(self, command: RunAiActionInput) -> RunAiActionOutput:
        action = AI_ACTIONS.get(command.action)
        if action is None:
            raise ValidationError(f"Unknown AI action '{command.action}'.")

        entitlement = self._get_user_entitlements_use_case.resolve(user_id=command.user_id)
        if not has_capability(entitlement.plan, action.capability):
            logger.info(
                "ai: feature_locked user_id=%s action=%s plan=%s",
                command.user_id,
                action.name,
                entitlement.plan.id,
            )
            return RunAiActionOutput(
                action=action.name,
                allowed=False,
                result=None,
                plan_code=entitlement.plan.id,
                remaining_ai_uses=entitlement.remaining_ai_uses,
                denial_reason="feature_locked",
            )

        request = action.build_request(command.params or {})

        decision = self._attempt_ai_use_use_case.execute(user_id=command.user_id)
        if not decision.allowed:
            return RunAiActionOutput(
                action=action.name,
                allowed=False,
                result=None,
                plan_code=decision.plan_code,
                remaining_ai_uses=decision.remaining_ai_uses,
                denial_reason="quota_exhausted",
            )

        result = self._ai_completion_port.complete(request)
        if action.name == "suggest_trends":
            result = _normalize_trends(result)

        logger.info("ai: action_completed user_id=%s action=%s", command.user_id, action.name)
        return RunAiActionOutput(
            action=action.name,
            allowed=True,
            result=result,
            plan_code=decision.plan_code,
            remaining_ai_uses=decision.remaining_ai_uses,
        )
