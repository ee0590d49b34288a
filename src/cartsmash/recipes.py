"""Recipe storage: cloud database when signed in, session memory otherwise."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from cartsmash.firebase import FirebaseServices
from cartsmash.models import Recipe

logger = logging.getLogger(__name__)


class RecipeStore(Protocol):
    def save(self, recipe: Recipe) -> None: ...

    def get(self, recipe_id: str) -> Recipe | None: ...

    def list(self) -> list[Recipe]: ...

    def delete(self, recipe_id: str) -> None: ...


class SessionRecipeStore:
    """Recipes kept for the lifetime of the session only."""

    def __init__(self) -> None:
        self._recipes: dict[str, Recipe] = {}

    def save(self, recipe: Recipe) -> None:
        self._recipes[recipe.id] = recipe

    def get(self, recipe_id: str) -> Recipe | None:
        return self._recipes.get(recipe_id)

    def list(self) -> list[Recipe]:
        return list(self._recipes.values())

    def delete(self, recipe_id: str) -> None:
        self._recipes.pop(recipe_id, None)


class CloudRecipeStore:
    """Recipes under ``users/<uid>/recipes`` in the realtime database."""

    def __init__(self, reference: Any) -> None:
        self._ref = reference

    def save(self, recipe: Recipe) -> None:
        self._ref.child(recipe.id).set(recipe.model_dump(mode="json"))

    def get(self, recipe_id: str) -> Recipe | None:
        data = self._ref.child(recipe_id).get()
        return Recipe.model_validate(data) if data else None

    def list(self) -> list[Recipe]:
        data = self._ref.get() or {}
        # integer-like keys come back from the database as a sparse list
        items = data.values() if isinstance(data, dict) else data
        return [Recipe.model_validate(item) for item in items if item]

    def delete(self, recipe_id: str) -> None:
        self._ref.child(recipe_id).delete()


def recipe_store_for(
    user_id: str | None,
    services: FirebaseServices | None,
) -> RecipeStore:
    """Pick the canonical recipe store for the current user."""
    if user_id and services is not None:
        return CloudRecipeStore(services.reference(f"users/{user_id}/recipes"))
    logger.debug("No signed-in user or cloud database; keeping recipes in session")
    return SessionRecipeStore()
