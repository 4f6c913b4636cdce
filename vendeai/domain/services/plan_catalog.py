from __future__ import annotations

from decimal import Decimal
from types import MappingProxyType

from vendeai.domain.entities.feature import (
    AD_GENERATION,
    COMPETITOR_ANALYSIS,
    PRODUCT_ANALYSIS,
    PRODUCTS_LIMIT,
    SALES_DASHBOARD,
    SMART_CHAT,
    TREND_SUGGESTIONS,
)
from vendeai.domain.entities.plan import UNLIMITED, Plan
from vendeai.domain.exceptions import InvalidPlanError


DEFAULT_PLAN_CODE = "free"

_FREE_CAPABILITIES = frozenset({SMART_CHAT, TREND_SUGGESTIONS})
_PAID_CAPABILITIES = _FREE_CAPABILITIES | {
    PRODUCT_ANALYSIS,
    AD_GENERATION,
    COMPETITOR_ANALYSIS,
    SALES_DASHBOARD,
}

PLANS: MappingProxyType[str, Plan] = MappingProxyType(
    {
        "free": Plan(
            id="free",
            name="Free",
            sort_order=0,
            ai_quota=20,
            capabilities=_FREE_CAPABILITIES,
            limits={PRODUCTS_LIMIT: 5},
            is_purchasable=False,
        ),
        "pro": Plan(
            id="pro",
            name="Pro",
            sort_order=10,
            ai_quota=150,
            capabilities=_PAID_CAPABILITIES,
            limits={PRODUCTS_LIMIT: None},
            is_purchasable=True,
        ),
        "premium": Plan(
            id="premium",
            name="Premium",
            sort_order=20,
            ai_quota=UNLIMITED,
            capabilities=_PAID_CAPABILITIES,
            limits={PRODUCTS_LIMIT: None},
            is_purchasable=True,
        ),
    }
)

# Card rail charges integer cents.
CARD_PRICES_CENTS: MappingProxyType[str, dict[str, int]] = MappingProxyType(
    {
        "pro": {"month": 2900, "year": 29000},
        "premium": {"month": 4900, "year": 49000},
    }
)

# PIX rail charges decimal reais.
PIX_PRICES: MappingProxyType[str, dict[str, Decimal]] = MappingProxyType(
    {
        "pro": {"month": Decimal("29.00"), "year": Decimal("290.00")},
        "premium": {"month": Decimal("49.00"), "year": Decimal("490.00")},
    }
)


def list_plans() -> list[Plan]:
    return sorted(PLANS.values(), key=lambda plan: plan.sort_order)


def get_plan(plan_code: str | None) -> Plan:
    """Return the catalog entry, falling back to the free plan for unknown codes."""
    if plan_code and plan_code in PLANS:
        return PLANS[plan_code]
    return PLANS[DEFAULT_PLAN_CODE]


def require_purchasable_plan(plan_code: str) -> Plan:
    plan = PLANS.get((plan_code or "").strip().lower())
    if plan is None or not plan.is_purchasable:
        raise InvalidPlanError(f"Invalid plan '{plan_code}'.")
    return plan


def card_price_cents(plan_code: str, interval: str = "month") -> int:
    plan = require_purchasable_plan(plan_code)
    prices = CARD_PRICES_CENTS[plan.id]
    if interval not in prices:
        raise InvalidPlanError(f"Invalid billing interval '{interval}'.")
    return prices[interval]


def pix_price(plan_code: str, interval: str = "month") -> Decimal:
    plan = require_purchasable_plan(plan_code)
    prices = PIX_PRICES[plan.id]
    if interval not in prices:
        raise InvalidPlanError(f"Invalid billing interval '{interval}'.")
    return prices[interval]
