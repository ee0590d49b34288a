"""Client for the CartSmash backend's Kroger auth and cart routes."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

import httpx

from cartsmash.endpoints import build_endpoints
from cartsmash.models import AuthStatus, CartSendRequest, CartSendResult

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Raised when the CartSmash backend cannot be reached or replies with garbage."""


def _json(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError as e:
        raise BackendError(
            f"Backend returned a non-JSON body: {response.status_code} {response.text}"
        ) from e
    if not isinstance(data, dict):
        raise BackendError(f"Unexpected backend payload: {data!r}")
    return data


async def get_auth_status(user_id: str, base_url: str | None = None) -> AuthStatus:
    """Check whether ``user_id`` has connected a Kroger account."""
    url = build_endpoints(base_url).kroger_auth_status
    async with httpx.AsyncClient() as client:
        try:
            response = await client.get(url, headers={"user-id": user_id})
        except httpx.HTTPError as e:
            raise BackendError(f"Auth status check failed: {e}") from e
    if response.status_code == 401:
        return AuthStatus(authenticated=False, user_id=user_id)
    return AuthStatus.model_validate(_json(response))


async def get_user_auth_status(user_id: str, base_url: str | None = None) -> AuthStatus:
    """Check auth for a real (Firebase) user through the query-string route."""
    url = build_endpoints(base_url).kroger_user_status
    async with httpx.AsyncClient() as client:
        try:
            response = await client.get(url, params={"userId": user_id})
        except httpx.HTTPError as e:
            raise BackendError(f"Auth status check failed: {e}") from e
    if response.status_code == 401:
        return AuthStatus(authenticated=False, user_id=user_id)
    return AuthStatus.model_validate(_json(response))


def build_login_url(user_id: str, base_url: str | None = None) -> str:
    """Browser-navigable OAuth entry point for ``user_id``."""
    login = build_endpoints(base_url).kroger_login
    return f"{login}?{urlencode({'userId': user_id})}"


async def send_cart(
    user_id: str,
    request: CartSendRequest,
    base_url: str | None = None,
) -> CartSendResult:
    """Send parsed cart items to the user's Kroger cart via the backend."""
    url = build_endpoints(base_url).kroger_cart_send
    payload = request.model_dump(mode="json", by_alias=True)
    logger.debug("Sending %d items to %s", len(request.cart_items), url)
    async with httpx.AsyncClient() as client:
        try:
            response = await client.post(
                url,
                headers={"user-id": user_id},
                json=payload,
            )
        except httpx.HTTPError as e:
            raise BackendError(f"Cart send failed: {e}") from e
    return CartSendResult.model_validate(_json(response))
