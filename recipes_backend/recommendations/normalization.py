from __future__ import annotations

from collections.abc import Iterable


def normalize_ingredient(value: str) -> str:
    """Lowercase and trim an ingredient name. Idempotent."""
    return value.lower().strip()


def normalize_selection(ingredients: Iterable[str]) -> list[str]:
    """Normalize a pantry selection, dropping blanks and repeats (first one wins)."""
    seen: set[str] = set()
    selection: list[str] = []
    for raw in ingredients:
        if not isinstance(raw, str):
            continue
        name = normalize_ingredient(raw)
        if name and name not in seen:
            seen.add(name)
            selection.append(name)
    return selection


def tokenize_query(query: str) -> list[str]:
    """Split a free-text query into distinct lowercase terms, in query order."""
    terms: list[str] = []
    for term in query.lower().split():
        if term not in terms:
            terms.append(term)
    return terms


def ingredient_matches(selected: str, recipe_ingredient: str) -> bool:
    """Asymmetric substring predicate between two normalized names.

    ``"chicken"`` matches ``"chicken breast"`` (forward), and
    ``"chicken breast"`` matches ``"chicken"`` because the selected name is
    the longer, more specific one (reverse). Short names match broadly; there
    is no minimum length.
    """
    if selected in recipe_ingredient:
        return True
    return len(selected) > len(recipe_ingredient) and recipe_ingredient in selected


def subsequence_ratio(term: str, text: str) -> float:
    """Fraction of *term*'s characters found in order within *text*."""
    if not term:
        return 0.0
    found = 0
    for ch in text:
        if ch == term[found]:
            found += 1
            if found == len(term):
                break
    return found / len(term)
