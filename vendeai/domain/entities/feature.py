from __future__ import annotations


SMART_CHAT = "smart_chat"
TREND_SUGGESTIONS = "trend_suggestions"
PRODUCT_ANALYSIS = "product_analysis"
AD_GENERATION = "ad_generation"
COMPETITOR_ANALYSIS = "competitor_analysis"
SALES_DASHBOARD = "sales_dashboard"

PRODUCTS_LIMIT = "products"
