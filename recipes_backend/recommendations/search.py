"""
Free-text recipe search.

A lightweight heuristic, not a search index: each query term is scored
against the title (exact, prefix, substring, word prefix, then an in-order
character ratio) and checked as a plain substring against the body text
(ingredients followed by instructions). Title relevance counts double, so
title hits rank above body-only hits.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from ..store.recipe_store import RecipeSource, get_recipe_store
from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .models import Recipe, SearchHit, coerce_recipe
from .normalization import subsequence_ratio, tokenize_query
from .snippets import build_context_snippet

logger = logging.getLogger(__name__)

TITLE_MATCH_SCORES = {
    "exact": 1.0,
    "starts_with": 0.9,
    "contains": 0.8,
    "word_prefix": 0.7,
    "fuzzy_scale": 0.5,
}


def score_term_match(
    term: str,
    title: str,
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> float:
    """Score a single lowercase term against a title; 0.0 means no match."""
    if not term:
        return 0.0
    title = title.lower().strip()
    if title == term:
        return TITLE_MATCH_SCORES["exact"]
    if title.startswith(term):
        return TITLE_MATCH_SCORES["starts_with"]
    if term in title:
        return TITLE_MATCH_SCORES["contains"]
    if any(word.startswith(term) for word in title.split()):
        return TITLE_MATCH_SCORES["word_prefix"]
    ratio = subsequence_ratio(term, title)
    if ratio >= config.fuzzy_threshold:
        return ratio * TITLE_MATCH_SCORES["fuzzy_scale"]
    return 0.0


def body_text(recipe: Recipe) -> str:
    return f"{', '.join(recipe.ingredients)} {recipe.instructions}"


def score_recipe_for_terms(
    recipe: Recipe,
    terms: Sequence[str],
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> SearchHit | None:
    """Build a hit for *recipe*, or ``None`` when no term matches anywhere."""
    if not recipe.title.strip():
        return None

    term_scores = [score_term_match(t, recipe.title, config) for t in terms]
    title_matched = sum(1 for s in term_scores if s > 0)
    title_score = sum(term_scores)

    body = body_text(recipe).lower()
    body_terms = [t for t in terms if t in body]

    matched_count = max(title_matched, len(body_terms))
    if matched_count == 0:
        return None

    hit_in_title = title_matched > 0
    snippet = None
    if not hit_in_title and body_terms:
        snippet = build_context_snippet(recipe, body_terms, config)

    return SearchHit(
        recipe=recipe,
        matched_count=matched_count,
        total_score=title_score * config.title_weight + len(body_terms) * config.body_weight,
        title_score=title_score,
        hit_in_title=hit_in_title,
        context_snippet=snippet,
    )


def rank_hits(hits: Sequence[SearchHit]) -> list[SearchHit]:
    """Title hits first, then more matched terms, then higher score."""
    return sorted(
        hits,
        key=lambda h: (not h.hit_in_title, -h.matched_count, -h.total_score),
    )


def search_recipes(
    query: str,
    recipe_store: RecipeSource | None = None,
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> list[SearchHit]:
    """Search titles, ingredients and instructions for a free-text query."""
    terms = tokenize_query(query or "")
    if not terms:
        return []

    try:
        source = recipe_store if recipe_store is not None else get_recipe_store()
        records = list(source.list_recipes(config.scan_limit))
    except Exception:
        logger.error("Recipe store unavailable, returning no search results", exc_info=True)
        return []

    hits: list[SearchHit] = []
    for record in records:
        recipe = coerce_recipe(record)
        if recipe is None:
            continue
        hit = score_recipe_for_terms(recipe, terms, config)
        if hit is not None:
            hits.append(hit)

    logger.debug("Search %r matched %d of %d scanned recipes", query, len(hits), len(records))
    return rank_hits(hits)[: config.max_results]
