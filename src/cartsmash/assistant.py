"""The "Ask the AI" prompt box.

Holds the state the web client's prompt component renders from, and talks to
the backend's ``/api/ai/<engine>`` routes.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

import httpx

from cartsmash.endpoints import get_ai_endpoint
from cartsmash.models import Engine

NO_RESPONSE = "No response received."
LOADING_TEXT = "Thinking..."

logger = logging.getLogger(__name__)


class BoxState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILURE = "failure"


def parse_ai_response(data: Any) -> str:
    """Pull display text out of an AI route response.

    Accepts a chat-completion shape (``choices[0].message.content``) or a flat
    ``content`` field, falling back to :data:`NO_RESPONSE`.
    """
    if not isinstance(data, dict):
        return NO_RESPONSE
    choices = data.get("choices")
    if isinstance(choices, list) and choices:
        first = choices[0] if isinstance(choices[0], dict) else {}
        message = first.get("message")
        if isinstance(message, dict) and message.get("content"):
            return message["content"]
    return data.get("content") or NO_RESPONSE


class AssistantBox:
    """Prompt submission with a single outstanding request at a time."""

    def __init__(
        self,
        engine: Engine | str = Engine.CLAUDE,
        base_url: str | None = None,
    ) -> None:
        self.engine = Engine(engine)
        self.base_url = base_url
        self.prompt = ""
        self.response = ""
        self.loading = False
        self.state = BoxState.IDLE

    def render(self) -> str:
        return LOADING_TEXT if self.loading else self.response

    async def submit(self) -> None:
        if not self.prompt.strip() or self.loading:
            return

        self.loading = True
        self.state = BoxState.SUBMITTING
        self.response = ""

        url = get_ai_endpoint(self.engine.value, self.base_url)
        try:
            async with httpx.AsyncClient() as client:
                res = await client.post(url, json={"prompt": self.prompt})
            data = res.json()
            self.response = parse_ai_response(data)
            self.state = BoxState.SUCCESS
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("AI request to %s failed: %s", url, e)
            self.response = f"Error: {e}"
            self.state = BoxState.FAILURE
        finally:
            self.loading = False
