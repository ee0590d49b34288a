"""Pydantic models for CartSmash backend, AI and Kroger payloads."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Engine(str, Enum):
    """AI provider selectable in the prompt box."""

    CLAUDE = "claude"
    CHATGPT = "chatgpt"


class Modality(str, Enum):
    """Kroger fulfilment mode for a cart send."""

    PICKUP = "PICKUP"
    DELIVERY = "DELIVERY"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CartItem(_CamelModel):
    """A parsed grocery line to push into the retailer cart."""

    product_name: str
    quantity: int = 1
    unit: str = "each"


class CartSendRequest(_CamelModel):
    """Body of ``POST /api/kroger-orders/cart/send``."""

    cart_items: list[CartItem]
    store_id: str
    modality: Modality = Modality.PICKUP


class CartSendResult(_CamelModel):
    """Response of the cart send endpoint."""

    success: bool = False
    items_added: int = 0
    items_failed: int = 0
    message: str | None = None
    error: str | None = None


class AuthStatus(BaseModel):
    """Kroger authentication state for a CartSmash user."""

    authenticated: bool = False
    user_id: str | None = Field(default=None, alias="userId")
    message: str | None = None

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class TokenResponse(BaseModel):
    """OAuth2 token response from the Kroger API."""

    access_token: str
    refresh_token: str = ""
    token_type: str = "Bearer"
    expires_in: int = 1800
    scope: str = ""


class Recipe(BaseModel):
    """A saved recipe."""

    id: str
    title: str
    ingredients: list[str] = []
    instructions: list[str] = []
