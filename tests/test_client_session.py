from __future__ import annotations

import httpx
import pytest

from test_api_routers import Backend, build_client
from vendeai.client.session import VendeAiClient, VendeAiClientError


@pytest.fixture
def backend() -> Backend:
    return Backend()


@pytest.fixture
def vendeai(backend: Backend) -> VendeAiClient:
    return VendeAiClient(http_client=build_client(backend))


def test_register_loads_entitlements_from_server(vendeai):
    snapshot = vendeai.register(name="User", email="user@example.com", password="12345678")

    assert vendeai.is_authenticated
    assert vendeai.user["email"] == "user@example.com"
    assert snapshot.plan_code == "free"
    assert snapshot.remaining_ai_uses == 20
    assert snapshot.has_capability("smart_chat")
    assert not snapshot.has_capability("ad_generation")


def test_snapshot_is_refreshed_from_server_after_each_ai_use(vendeai, backend):
    vendeai.register(name="User", email="user@example.com", password="12345678")

    assert vendeai.attempt_ai_use() is True
    assert vendeai.entitlements.ai_uses == 1
    assert vendeai.entitlements.remaining_ai_uses == 19

    user_id = vendeai.user["id"]
    backend.accounts.try_increment_ai_uses(user_id=user_id, plan_code="free", quota=None)
    vendeai.refresh()
    assert vendeai.entitlements.ai_uses == 2


def test_exhausted_quota_is_reported_without_local_guessing(vendeai, backend):
    vendeai.register(name="User", email="user@example.com", password="12345678")
    user_id = vendeai.user["id"]
    for _ in range(20):
        backend.accounts.try_increment_ai_uses(user_id=user_id, plan_code="free", quota=20)

    assert vendeai.attempt_ai_use() is False
    assert vendeai.entitlements.can_use_ai is False


def test_card_upgrade_refreshes_plan(vendeai, backend):
    vendeai.register(name="User", email="user@example.com", password="12345678")
    intent = vendeai.create_card_intent(plan_code="pro")
    backend.stripe.succeed(intent["payment_intent_id"])

    vendeai.confirm_card_payment(payment_intent_id=intent["payment_intent_id"])

    assert vendeai.entitlements.plan_code == "pro"
    assert vendeai.entitlements.remaining_ai_uses == 150


def test_failed_mutation_still_refreshes_snapshot(vendeai, backend):
    vendeai.register(name="User", email="user@example.com", password="12345678")
    intent = vendeai.create_card_intent(plan_code="pro")

    with pytest.raises(VendeAiClientError) as excinfo:
        vendeai.confirm_card_payment(payment_intent_id=intent["payment_intent_id"])

    assert excinfo.value.status_code == 402
    assert vendeai.entitlements.plan_code == "free"


def test_server_side_logout_clears_local_session(vendeai, backend):
    vendeai.register(name="User", email="user@example.com", password="12345678")
    backend.accounts.sessions.clear()

    with pytest.raises(VendeAiClientError) as excinfo:
        vendeai.refresh()

    assert excinfo.value.requires_login
    assert not vendeai.is_authenticated
    assert vendeai.entitlements is None


def test_logout_clears_state_and_login_restores_it(vendeai):
    vendeai.register(name="User", email="user@example.com", password="12345678")

    vendeai.logout()
    assert not vendeai.is_authenticated
    assert vendeai.entitlements is None

    snapshot = vendeai.login(email="user@example.com", password="12345678")
    assert snapshot.plan_code == "free"


def test_bad_credentials_raise_with_server_detail(vendeai):
    vendeai.register(name="User", email="user@example.com", password="12345678")
    vendeai.logout()

    with pytest.raises(VendeAiClientError) as excinfo:
        vendeai.login(email="user@example.com", password="wrong-password")

    assert excinfo.value.requires_login
    assert excinfo.value.detail == "Invalid credentials."


@pytest.mark.parametrize("body", ['["bad", "request"]', '"bad request"', "42", "not json"])
def test_error_body_that_is_not_an_object_is_reported_as_text(body):
    transport = httpx.MockTransport(lambda request: httpx.Response(400, content=body.encode("utf-8")))
    client = VendeAiClient(http_client=httpx.Client(base_url="https://api.test", transport=transport))

    with pytest.raises(VendeAiClientError) as excinfo:
        client.login(email="user@example.com", password="12345678")

    assert excinfo.value.status_code == 400
    assert excinfo.value.detail == body
