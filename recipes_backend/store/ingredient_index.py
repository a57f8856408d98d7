from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from ..recommendations.models import Recipe
from ..recommendations.normalization import normalize_selection
from .models import IngredientCount
from .recipe_store import get_recipe_store


def _unique_names(recipe: Recipe) -> list[str]:
    return normalize_selection(recipe.normalized_ingredients)


class IngredientIndex:
    """How many recipes use each normalized ingredient name.

    Backs ingredient autocomplete. A recipe counts once per name no matter how
    often the name repeats inside it.
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._counts)

    def recalculate(self, recipes: Iterable[Recipe]) -> int:
        names = pd.Series([_unique_names(r) for r in recipes], dtype=object)
        counts = names.explode().dropna().value_counts()
        self._counts = {str(name): int(freq) for name, freq in counts.items()}
        return len(self._counts)

    def increment(self, name: str) -> None:
        self._counts[name] = self._counts.get(name, 0) + 1

    def decrement(self, name: str) -> None:
        current = self._counts.get(name)
        if current is None:
            return
        if current <= 1:
            del self._counts[name]
        else:
            self._counts[name] = current - 1

    def on_edit(self, old: Recipe, new: Recipe) -> None:
        for name in _unique_names(old):
            self.decrement(name)
        for name in _unique_names(new):
            self.increment(name)

    def on_fork(self, recipe: Recipe) -> None:
        for name in _unique_names(recipe):
            self.increment(name)

    def frequency(self, name: str) -> int:
        return self._counts.get(name, 0)

    def entries(self) -> list[IngredientCount]:
        """All names, most frequent first, ties alphabetical."""
        ordered = sorted(self._counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return [IngredientCount(name=n, frequency=f) for n, f in ordered]


_index: IngredientIndex | None = None


def get_ingredient_index() -> IngredientIndex:
    """Return the process-wide index, building it from the recipe store on first call."""
    global _index
    if _index is None:
        index = IngredientIndex()
        index.recalculate(get_recipe_store().list_recipes())
        _index = index
    return _index
