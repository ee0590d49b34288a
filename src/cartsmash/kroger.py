"""Kroger OAuth2 client credentials."""

from __future__ import annotations

import base64
import logging

import httpx
from pydantic import ValidationError

from cartsmash.models import TokenResponse

KROGER_BASE_URL = "https://api.kroger.com/v1"
KROGER_CERT_BASE_URL = "https://api-ce.kroger.com/v1"
KROGER_TOKEN_URL = f"{KROGER_BASE_URL}/connect/oauth2/token"
KROGER_ENVIRONMENTS = {
    "PRODUCTION": KROGER_BASE_URL,
    "CERTIFICATION": KROGER_CERT_BASE_URL,
}

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Raised when authentication with the Kroger API fails."""


async def get_client_token(
    client_id: str,
    client_secret: str,
    token_url: str = KROGER_TOKEN_URL,
    scope: str = "product.compact",
) -> TokenResponse:
    """Obtain a client credentials token (no user context)."""
    credentials = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()

    async with httpx.AsyncClient() as client:
        try:
            response = await client.post(
                token_url,
                headers={"Authorization": f"Basic {credentials}"},
                data={
                    "grant_type": "client_credentials",
                    "scope": scope,
                },
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Token request to {token_url} failed: {e}") from e
        if response.status_code != 200:
            raise AuthError(
                f"Failed to get client token: {response.status_code} {response.text}"
            )
        try:
            return TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise AuthError(
                f"Unexpected token response: {response.status_code} {response.text}"
            ) from e


async def probe_environments(
    client_id: str,
    client_secret: str,
) -> dict[str, TokenResponse | AuthError]:
    """Try the client credentials grant against every Kroger environment.

    Returns the token, or the error that environment raised, keyed by
    environment name in production-first order.
    """
    results: dict[str, TokenResponse | AuthError] = {}
    for name, base_url in KROGER_ENVIRONMENTS.items():
        try:
            results[name] = await get_client_token(
                client_id,
                client_secret,
                token_url=f"{base_url}/connect/oauth2/token",
            )
        except AuthError as e:
            logger.debug("%s token request failed: %s", name, e)
            results[name] = e
    return results
