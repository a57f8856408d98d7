from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol

import pandas as pd
from pydantic import ValidationError

from ..recommendations.models import Recipe
from .config import DEFAULT_STORE_CONFIG, StoreConfig
from .errors import StoreUnavailable

logger = logging.getLogger(__name__)

_LIST_COLUMNS = ("ingredients", "normalizedIngredients", "normalized_ingredients")
_TEXT_COLUMNS = ("title", "instructions")


class RecipeSource(Protocol):
    def list_recipes(self, limit: int | None = None) -> list[Recipe]: ...

    def get_recipe_by_id(self, recipe_id: str) -> Recipe | None: ...


class RecipeStore:
    """In-memory recipe table keyed by id.

    Iteration order is insertion order, so ``list_recipes(limit)`` returns the
    same prefix for as long as the store is not reloaded.
    """

    def __init__(self) -> None:
        self._recipes: dict[str, Recipe] = {}
        self.revision = 0

    def __len__(self) -> int:
        return len(self._recipes)

    def list_recipes(self, limit: int | None = None) -> list[Recipe]:
        recipes = iter(self._recipes.values())
        if limit is None:
            return list(recipes)
        return list(itertools.islice(recipes, max(limit, 0)))

    def get_recipe_by_id(self, recipe_id: str) -> Recipe | None:
        return self._recipes.get(str(recipe_id))

    def bulk_load(self, records: Iterable[Recipe | dict[str, Any]]) -> int:
        """Replace the whole corpus. Returns how many recipes were loaded."""
        self._recipes.clear()
        skipped = 0
        for record in records:
            try:
                recipe = record if isinstance(record, Recipe) else Recipe.model_validate(record)
            except ValidationError:
                skipped += 1
                continue
            self._recipes[recipe.id] = recipe
        self.revision += 1
        if skipped:
            logger.warning("Skipped %d malformed recipe records during load", skipped)
        logger.info("Loaded %d recipes", len(self._recipes))
        return len(self._recipes)

    def add(self, recipe: Recipe) -> str:
        if recipe.id in self._recipes:
            raise ValueError(f"Recipe {recipe.id!r} already exists")
        self._recipes[recipe.id] = recipe
        self.revision += 1
        return recipe.id

    def put(self, recipe: Recipe) -> None:
        self._recipes[recipe.id] = recipe
        self.revision += 1

    def clear(self) -> None:
        self._recipes.clear()
        self.revision += 1


def read_recipe_records(path: Path) -> list[dict[str, Any]]:
    """Read a processed recipes JSON file into plain records."""
    try:
        df = pd.read_json(path, orient="records", convert_dates=False)
    except (OSError, ValueError) as exc:
        raise StoreUnavailable(f"Cannot read recipes from {path}") from exc

    for col in _TEXT_COLUMNS:
        if col in df.columns:
            df[col] = df[col].fillna("").astype(str)
    # Missing list cells come back as NaN; the Recipe model derives them instead.
    for col in _LIST_COLUMNS:
        if col in df.columns:
            df[col] = df[col].apply(lambda v: v if isinstance(v, list) else None)

    return df.to_dict(orient="records")


_store: RecipeStore | None = None


def get_recipe_store(config: StoreConfig = DEFAULT_STORE_CONFIG) -> RecipeStore:
    """Return the process-wide recipe store, loading the processed file on first call."""
    global _store
    if _store is None:
        store = RecipeStore()
        if config.recipes_path.exists():
            store.bulk_load(read_recipe_records(config.recipes_path))
        else:
            logger.info("No processed recipes at %s; starting empty", config.recipes_path)
        _store = store
    return _store
