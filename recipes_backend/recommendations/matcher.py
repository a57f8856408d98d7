"""
Pantry-driven recipe suggestions.

Given the ingredients a user has selected, scan a bounded prefix of the
recipe store, keep recipes that mention at least one of them, score each
one and return the best few.

Scoring:

    score = primary * 1000 + secondary * 100 + completeness * 100

* ``primary``   selected ingredients found in the recipe's ingredient list
* ``secondary`` selected ingredients found anywhere in the instructions
* ``completeness`` primary / number of selected ingredients

A single ingredient-list hit outweighs any number of instruction hits, and
completeness only separates recipes with the same hit counts.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from functools import cmp_to_key
from typing import Any

from ..store.library import PreferenceSource, get_library
from ..store.models import LibraryStatus
from ..store.recipe_store import RecipeSource, get_recipe_store
from .config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .models import Recipe, ScoredMatch, coerce_recipe
from .normalization import ingredient_matches, normalize_ingredient, normalize_selection

logger = logging.getLogger(__name__)


def recipe_ingredient_names(recipe: Recipe) -> list[str]:
    """Union of raw and normalized ingredient names, normalized and de-duplicated."""
    names = dict.fromkeys(
        normalize_ingredient(name)
        for name in (*recipe.ingredients, *recipe.normalized_ingredients)
    )
    # A blank name would reverse-match every selection.
    names.pop("", None)
    return list(names)


async def _yield_control() -> None:
    await asyncio.sleep(0)


def _matched_in_list(names: Sequence[str], selected: Sequence[str]) -> list[str]:
    return [s for s in selected if any(ingredient_matches(s, name) for name in names)]


def _count_in_instructions(recipe: Recipe, selected: Sequence[str]) -> int:
    text = recipe.instructions.lower()
    return sum(1 for s in selected if s in text)


def is_candidate(recipe: Recipe, selected: Sequence[str]) -> bool:
    names = recipe_ingredient_names(recipe)
    if any(ingredient_matches(s, name) for s in selected for name in names):
        return True
    return _count_in_instructions(recipe, selected) > 0


def score_recipe(
    recipe: Recipe,
    selected: Sequence[str],
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> ScoredMatch:
    """Score one recipe against an already normalized selection."""
    matched = _matched_in_list(recipe_ingredient_names(recipe), selected)
    primary = len(matched)
    secondary = _count_in_instructions(recipe, selected)
    completeness = primary / len(selected) if selected else 0.0
    score = (
        primary * config.primary_weight
        + secondary * config.secondary_weight
        + completeness * config.completeness_weight
    )
    return ScoredMatch(
        recipe=recipe,
        primary_matches=primary,
        secondary_matches=secondary,
        completeness=completeness,
        score=score,
        matched_ingredients=matched,
        total_selected=len(selected),
    )


def _compare(a: ScoredMatch, b: ScoredMatch, tolerance: float) -> int:
    if abs(a.score - b.score) > tolerance:
        return -1 if a.score > b.score else 1
    if a.primary_matches != b.primary_matches:
        return b.primary_matches - a.primary_matches
    return b.secondary_matches - a.secondary_matches


def rank_matches(
    matches: Iterable[ScoredMatch],
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> list[ScoredMatch]:
    """Order best first and drop recipes with no hits at all."""
    ranked = sorted(
        matches,
        key=cmp_to_key(lambda a, b: _compare(a, b, config.tie_tolerance)),
    )
    return [m for m in ranked if m.primary_matches or m.secondary_matches]


async def _collect_candidates(
    records: Sequence[Any],
    selected: Sequence[str],
    disliked: set[str],
    config: MatchingConfig,
) -> list[Recipe]:
    candidates: list[Recipe] = []
    chunk_size = max(config.chunk_size, 1)
    for start in range(0, len(records), chunk_size):
        if start:
            # Hand control back to the event loop between chunks, never inside one.
            await _yield_control()
        for record in records[start:start + chunk_size]:
            recipe = coerce_recipe(record)
            if recipe is None or recipe.id in disliked:
                continue
            if is_candidate(recipe, selected):
                candidates.append(recipe)
                if len(candidates) >= config.candidate_target:
                    return candidates
    return candidates


async def find_matching_recipes(
    selected_ingredients: Iterable[str],
    recipe_store: RecipeSource | None = None,
    library: PreferenceSource | None = None,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> list[ScoredMatch]:
    """Return the top recipe suggestions for a pantry selection.

    Never raises for an unavailable store: the failure is logged and the
    result is empty. Disliked recipes are never returned.
    """
    selected = normalize_selection(selected_ingredients or [])
    if not selected:
        return []

    try:
        source = recipe_store if recipe_store is not None else get_recipe_store()
        preferences = library if library is not None else get_library()
        disliked = {str(i) for i in preferences.list_ids_by_status(LibraryStatus.dislike)}
        records = list(source.list_recipes(config.scan_limit))
    except Exception:
        # Any backend failure degrades to no suggestions.
        logger.error("Recipe store unavailable, returning no suggestions", exc_info=True)
        return []

    candidates = await _collect_candidates(records, selected, disliked, config)
    scored = [score_recipe(r, selected, config) for r in candidates[: config.scoring_cap]]
    results = rank_matches(scored, config)[: config.max_results]

    logger.debug(
        "Matched %d of %d scanned recipes for %d ingredients",
        len(candidates), len(records), len(selected),
    )
    return results
