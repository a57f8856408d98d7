from __future__ import annotations

import logging
from functools import cmp_to_key

from ..store.ingredient_index import IngredientIndex, get_ingredient_index
from ..store.models import IngredientCount
from .config import DEFAULT_INGREDIENT_SEARCH_CONFIG, IngredientSearchConfig
from .models import IngredientSuggestion
from .normalization import subsequence_ratio
from .snippets import highlight_terms

logger = logging.getLogger(__name__)

SIMILARITY_SCORES = {
    "exact": 1.0,
    "starts_with": 0.9,
    "contains": 0.7,
    "word_boundary": 0.6,
    "fuzzy_scale": 0.5,
}


def calculate_similarity(search_term: str, ingredient_name: str) -> float:
    search = search_term.lower().strip()
    ingredient = ingredient_name.lower().strip()
    if not search:
        return 0.0
    if ingredient == search:
        return SIMILARITY_SCORES["exact"]
    if ingredient.startswith(search):
        return SIMILARITY_SCORES["starts_with"]
    if search in ingredient:
        return SIMILARITY_SCORES["contains"]
    if any(word.startswith(search) for word in ingredient.split()):
        return SIMILARITY_SCORES["word_boundary"]
    return subsequence_ratio(search, ingredient) * SIMILARITY_SCORES["fuzzy_scale"]


def _by_relevance(tolerance: float):
    def compare(a: tuple[float, IngredientCount], b: tuple[float, IngredientCount]) -> int:
        (score_a, entry_a), (score_b, entry_b) = a, b
        if abs(score_a - score_b) > tolerance:
            return -1 if score_a > score_b else 1
        if entry_a.frequency != entry_b.frequency:
            return entry_b.frequency - entry_a.frequency
        return (entry_a.name > entry_b.name) - (entry_a.name < entry_b.name)

    return cmp_to_key(compare)


def search_ingredients(
    search_term: str,
    index: IngredientIndex | None = None,
    config: IngredientSearchConfig = DEFAULT_INGREDIENT_SEARCH_CONFIG,
) -> list[IngredientSuggestion]:
    """Autocomplete pantry ingredients against the known ingredient names."""
    term = (search_term or "").strip()
    if not term:
        return []

    try:
        index = index if index is not None else get_ingredient_index()
        entries = index.entries()
    except Exception:
        logger.error("Ingredient index unavailable, returning no suggestions", exc_info=True)
        return []
    if not entries:
        logger.warning("Ingredient index is empty")
        return []

    scored = [(calculate_similarity(term, e.name), e) for e in entries]
    kept = [pair for pair in scored if pair[0] > config.min_score]
    kept.sort(key=_by_relevance(config.tie_tolerance))

    return [
        IngredientSuggestion(
            name=entry.name,
            frequency=entry.frequency,
            score=score,
            highlighted=highlight_terms(entry.name, [term]),
        )
        for score, entry in kept[: config.max_results]
    ]
