"""Centralized CartSmash backend endpoint URLs."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from cartsmash.config import get_api_url


class ApiEndpoints(BaseModel):
    """Absolute URLs for every backend operation the client uses."""

    model_config = ConfigDict(frozen=True)

    # AI
    ai_anthropic: str
    ai_openai: str
    ai_google: str

    # Cart
    cart_parse: str

    # Recipes
    recipes: str

    # Instacart
    instacart_search: str
    instacart_batch_search: str
    instacart_compare_prices: str

    # Meal plans
    meal_plan_generate: str
    meal_plan_regenerate: str

    # Kroger orders
    kroger_auth_status: str
    kroger_cart_send: str
    kroger_login: str
    kroger_user_status: str


def _resolve_base(base_url: str | None) -> str:
    return base_url.rstrip("/") if base_url else get_api_url()


def build_endpoints(base_url: str | None = None) -> ApiEndpoints:
    """Build the endpoint registry against ``base_url`` (or the configured API URL)."""
    base = _resolve_base(base_url)
    return ApiEndpoints(
        ai_anthropic=f"{base}/api/ai/anthropic",
        ai_openai=f"{base}/api/ai/openai",
        ai_google=f"{base}/api/ai/google",
        cart_parse=f"{base}/api/cart/parse",
        recipes=f"{base}/api/recipes",
        instacart_search=f"{base}/api/instacart/search",
        instacart_batch_search=f"{base}/api/instacart/batch-search",
        instacart_compare_prices=f"{base}/api/instacart/compare-prices",
        meal_plan_generate=f"{base}/api/meal-plans/generate-meal-plan",
        meal_plan_regenerate=f"{base}/api/meal-plans/regenerate-meal",
        kroger_auth_status=f"{base}/api/kroger-orders/auth/status",
        kroger_cart_send=f"{base}/api/kroger-orders/cart/send",
        kroger_login=f"{base}/api/auth/kroger/login",
        kroger_user_status=f"{base}/api/auth/kroger/status",
    )


def get_ai_endpoint(provider: str, base_url: str | None = None) -> str:
    """Return the AI endpoint for ``provider`` (e.g. ``claude``, ``chatgpt``)."""
    return f"{_resolve_base(base_url)}/api/ai/{provider}"
