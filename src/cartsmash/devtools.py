"""Developer commands the host UI exposes to tooling."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

ENHANCED_CHECKOUT_VIEW = "enhanced-checkout"


class CommandRegistry:
    """Named callables registered by the host UI."""

    def __init__(self) -> None:
        self._commands: dict[str, Callable[..., Any]] = {}

    def register(self, name: str, fn: Callable[..., Any]) -> None:
        self._commands[name] = fn

    def names(self) -> list[str]:
        return sorted(self._commands)

    def __contains__(self, name: str) -> bool:
        return name in self._commands

    def run(self, name: str, *args: Any) -> Any:
        try:
            fn = self._commands[name]
        except KeyError:
            raise KeyError(f"Unknown developer command: {name}") from None
        return fn(*args)


def open_enhanced_checkout(registry: CommandRegistry) -> None:
    """Switch the host UI to the enhanced checkout demo."""
    print("Opening Enhanced Checkout Demo...")
    if "set_current_view" in registry:
        registry.run("set_current_view", ENHANCED_CHECKOUT_VIEW)
        return
    print("To test enhanced checkout:")
    print("1. Start the CartSmash UI so it registers set_current_view")
    print("2. Call open_enhanced_checkout(registry) from its developer console")
    print(f'3. Or manually set the current view to "{ENHANCED_CHECKOUT_VIEW}"')
