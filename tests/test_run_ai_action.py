from __future__ import annotations

import pytest

from fakes import FakeAccountsPort, FakeAiCompletion, make_subscription
from vendeai.application.dto.ai import RunAiActionInput
from vendeai.application.use_cases.attempt_ai_use import AttemptAiUseUseCase
from vendeai.application.use_cases.get_user_entitlements import GetUserEntitlementsUseCase
from vendeai.application.use_cases.run_ai_action import (
    DEEP_MODEL,
    FAST_MODEL,
    PRODUCT_ANALYSIS_SCHEMA,
    RunAiActionUseCase,
)
from vendeai.domain.exceptions import AiProviderError, ValidationError


def _build(accounts: FakeAccountsPort, ai: FakeAiCompletion) -> RunAiActionUseCase:
    return RunAiActionUseCase(
        get_user_entitlements_use_case=GetUserEntitlementsUseCase(subscriptions_port=accounts),
        attempt_ai_use_use_case=AttemptAiUseUseCase(subscriptions_port=accounts),
        ai_completion_port=ai,
    )


def _pro_accounts(ai_uses_count: int = 0) -> FakeAccountsPort:
    accounts = FakeAccountsPort()
    accounts.subscriptions["user-1"] = make_subscription(plan_code="pro", ai_uses_count=ai_uses_count)
    return accounts


def test_free_user_is_feature_locked_without_spending_quota():
    accounts = FakeAccountsPort()
    accounts.subscriptions["user-1"] = make_subscription(plan_code="free")
    ai = FakeAiCompletion()

    output = _build(accounts, ai).execute(
        RunAiActionInput(user_id="user-1", action="analyze_product", params={"description": "Tenis"})
    )

    assert output.allowed is False
    assert output.denial_reason == "feature_locked"
    assert output.plan_code == "free"
    assert ai.requests == []
    assert accounts.subscriptions["user-1"].ai_uses_count == 0


def test_pro_user_product_analysis_uses_schema_and_counts_one_use():
    accounts = _pro_accounts()
    ai = FakeAiCompletion(result={"category": "Calcados"})

    output = _build(accounts, ai).execute(
        RunAiActionInput(user_id="user-1", action="analyze_product", params={"description": "Tenis de corrida"})
    )

    assert output.allowed is True
    assert output.result == {"category": "Calcados"}
    assert output.remaining_ai_uses == 149
    (request,) = ai.requests
    assert request.model == FAST_MODEL
    assert request.response_schema == PRODUCT_ANALYSIS_SCHEMA
    assert "Tenis de corrida" in request.prompt


def test_product_analysis_with_image_uses_deep_model():
    accounts = _pro_accounts()
    ai = FakeAiCompletion()

    _build(accounts, ai).execute(
        RunAiActionInput(
            user_id="user-1",
            action="analyze_product",
            params={"image": {"mime_type": "image/png", "data": "aGVsbG8="}},
        )
    )

    (request,) = ai.requests
    assert request.model == DEEP_MODEL
    assert request.image_mime_type == "image/png"
    assert request.image_base64 == "aGVsbG8="


def test_quota_exhausted_is_reported_as_denial():
    accounts = _pro_accounts(ai_uses_count=150)
    ai = FakeAiCompletion()

    output = _build(accounts, ai).execute(
        RunAiActionInput(user_id="user-1", action="chat", params={"message": "Oi"})
    )

    assert output.allowed is False
    assert output.denial_reason == "quota_exhausted"
    assert output.remaining_ai_uses == 0
    assert ai.requests == []


def test_invalid_params_do_not_consume_a_use():
    accounts = _pro_accounts()

    with pytest.raises(ValidationError):
        _build(accounts, FakeAiCompletion()).execute(
            RunAiActionInput(user_id="user-1", action="generate_ads", params={"category": "Moda"})
        )

    assert accounts.subscriptions["user-1"].ai_uses_count == 0


def test_unknown_action_is_rejected():
    with pytest.raises(ValidationError):
        _build(_pro_accounts(), FakeAiCompletion()).execute(
            RunAiActionInput(user_id="user-1", action="write_poem", params={})
        )


def test_provider_failure_keeps_the_consumed_use():
    accounts = _pro_accounts()
    ai = FakeAiCompletion(error=AiProviderError("Gemini request failed."))

    with pytest.raises(AiProviderError):
        _build(accounts, ai).execute(
            RunAiActionInput(user_id="user-1", action="analyze_competitor", params={"description": "Loja X"})
        )

    assert accounts.subscriptions["user-1"].ai_uses_count == 1


def test_trend_suggestions_unwraps_single_key_object():
    accounts = FakeAccountsPort()
    trends = [{"productName": "Garrafa termica", "reasoning": "Verao"}]
    ai = FakeAiCompletion(result={"trends": trends})

    output = _build(accounts, ai).execute(RunAiActionInput(user_id="user-1", action="suggest_trends", params={}))

    assert output.allowed is True
    assert output.result == trends
    assert output.remaining_ai_uses == 19


def test_ad_copy_requires_numeric_price():
    with pytest.raises(ValidationError):
        _build(_pro_accounts(), FakeAiCompletion()).execute(
            RunAiActionInput(
                user_id="user-1",
                action="generate_ad_copy",
                params={
                    "product_name": "Caneca",
                    "description": "Caneca de ceramica",
                    "platform": "Instagram",
                    "tone": "divertido",
                    "price": "barato",
                },
            )
        )
