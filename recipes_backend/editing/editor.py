from __future__ import annotations

import logging
import time

from ..recommendations.models import Recipe
from ..recommendations.normalization import normalize_ingredient
from ..store.ingredient_index import IngredientIndex, get_ingredient_index
from ..store.library import RecipeLibrary, get_library
from ..store.recipe_store import RecipeStore, get_recipe_store
from .models import RecipeDraft, Substitution

logger = logging.getLogger(__name__)


def open_draft(recipe: Recipe, is_fork: bool = False) -> RecipeDraft:
    return RecipeDraft(
        source_id=recipe.id,
        title=recipe.title or "Untitled",
        ingredients=list(recipe.ingredients),
        normalized_ingredients=list(recipe.normalized_ingredients),
        instructions=recipe.instructions,
        is_fork=is_fork,
    )


def rename(draft: RecipeDraft, title: str) -> RecipeDraft:
    """Retitle the draft; a blank title keeps the current one."""
    new_title = title.strip()
    if not new_title:
        return draft
    return draft.model_copy(update={"title": new_title})


def _replace_line(draft: RecipeDraft, index: int, raw: str, normalized: str) -> RecipeDraft:
    if not 0 <= index < len(draft.ingredients):
        raise IndexError(f"No ingredient at position {index}")
    ingredients = list(draft.ingredients)
    normalized_list = list(draft.normalized_ingredients)
    # Older records can carry fewer normalized names than ingredient lines.
    normalized_list.extend(normalize_ingredient(i) for i in ingredients[len(normalized_list):])
    ingredients[index] = raw
    normalized_list[index] = normalized
    return draft.model_copy(
        update={"ingredients": ingredients, "normalized_ingredients": normalized_list}
    )


def manual_edit(draft: RecipeDraft, index: int, text: str) -> RecipeDraft:
    """Overwrite one ingredient line by hand. Blank text leaves it unchanged."""
    new_value = text.strip()
    if not new_value:
        return draft
    return _replace_line(draft, index, new_value, normalize_ingredient(new_value))


def accept_substitution(draft: RecipeDraft, index: int, substitution: Substitution) -> RecipeDraft:
    return _replace_line(draft, index, substitution.raw, substitution.normalized)


def _fork_id(store: RecipeStore) -> str:
    recipe_id = f"fork-{int(time.time() * 1000)}"
    suffix = 1
    candidate = recipe_id
    while store.get_recipe_by_id(candidate) is not None:
        suffix += 1
        candidate = f"{recipe_id}-{suffix}"
    return candidate


def save_draft(
    draft: RecipeDraft,
    recipe_store: RecipeStore | None = None,
    library: RecipeLibrary | None = None,
    index: IngredientIndex | None = None,
) -> Recipe:
    """Persist a draft as an edit of its source recipe, or as a new fork.

    Either way the ingredient index is updated and the saved recipe is
    liked automatically.
    """
    store = recipe_store if recipe_store is not None else get_recipe_store()
    library = library if library is not None else get_library()
    index = index if index is not None else get_ingredient_index()

    title = draft.title.strip() or "Untitled"
    recipe_id = _fork_id(store) if draft.is_fork else draft.source_id
    recipe = Recipe(
        id=recipe_id,
        title=title,
        ingredients=draft.ingredients,
        normalized_ingredients=draft.normalized_ingredients,
        instructions=draft.instructions,
    )

    if draft.is_fork:
        store.add(recipe)
        index.on_fork(recipe)
    else:
        original = store.get_recipe_by_id(draft.source_id)
        store.put(recipe)
        if original is not None:
            index.on_edit(original, recipe)
        else:
            index.on_fork(recipe)

    library.auto_like(recipe.id, title)
    logger.info("Saved %s %s", "fork" if draft.is_fork else "edit", recipe.id)
    return recipe
