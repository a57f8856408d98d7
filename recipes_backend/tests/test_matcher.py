from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock, patch

from recipes_backend.recommendations.config import MatchingConfig
from recipes_backend.recommendations.matcher import (
    find_matching_recipes,
    rank_matches,
    score_recipe,
)
from recipes_backend.recommendations.models import Recipe, ScoredMatch
from recipes_backend.store.errors import StoreUnavailable
from recipes_backend.store.library import RecipeLibrary
from recipes_backend.store.recipe_store import RecipeStore

RECIPES = [
    {"id": "r1", "title": "Pancakes", "ingredients": ["eggs", "flour", "milk"], "instructions": "mix and bake"},
    {"id": "r2", "title": "Sweet Tea", "ingredients": ["sugar"], "instructions": "add a pinch of salt"},
    {"id": "r3", "title": "Roast Chicken", "ingredients": ["chicken breast", "salt", "pepper"],
     "instructions": "Season the chicken and roast."},
    {"id": "r4", "title": "Chicken Stock", "ingredients": ["chicken", "water", "onion"],
     "instructions": "Simmer for hours."},
]


class ListStore:
    """Duck-typed store handing out raw records."""

    def __init__(self, records):
        self.records = records

    def list_recipes(self, limit=None):
        return self.records[:limit]

    def get_recipe_by_id(self, recipe_id):
        return None


class BrokenStore:
    def list_recipes(self, limit=None):
        raise StoreUnavailable("database closed")

    def get_recipe_by_id(self, recipe_id):
        raise StoreUnavailable("database closed")


class DisconnectedStore:
    def list_recipes(self, limit=None):
        raise OSError("database connection lost")

    def get_recipe_by_id(self, recipe_id):
        raise OSError("database connection lost")


class FailingPreferences:
    def list_ids_by_status(self, status):
        raise RuntimeError("preferences table locked")


def _store(*records) -> RecipeStore:
    store = RecipeStore()
    store.bulk_load(records or RECIPES)
    return store


def _run(selected, store=None, library=None, config=None) -> list[ScoredMatch]:
    kwargs = {"config": config} if config else {}
    return asyncio.run(find_matching_recipes(
        selected,
        recipe_store=store if store is not None else _store(),
        library=library if library is not None else RecipeLibrary(),
        **kwargs,
    ))


def _ids(results) -> list[str]:
    return [r.recipe.id for r in results]


def test_exact_ingredient_match():
    results = _run(["eggs", "flour"], store=_store(RECIPES[0]))
    assert _ids(results) == ["r1"]
    assert results[0].primary_matches == 2
    assert results[0].completeness == 1.0
    assert results[0].score == 2100
    assert results[0].matched_ingredients == ["eggs", "flour"]


def test_instruction_only_match():
    results = _run(["salt"], store=_store(RECIPES[1]))
    assert _ids(results) == ["r2"]
    assert results[0].primary_matches == 0
    assert results[0].secondary_matches == 1
    assert results[0].score == 100


def test_forward_substring_is_primary_match():
    results = _run(["chicken"], store=_store(RECIPES[2]))
    assert results[0].primary_matches == 1


def test_reverse_substring_is_primary_match():
    results = _run(["chicken breast"], store=_store(RECIPES[3]))
    assert _ids(results) == ["r4"]
    assert results[0].primary_matches == 1


def test_selection_is_normalized():
    results = _run(["  EGGS ", "Flour"], store=_store(RECIPES[0]))
    assert results[0].primary_matches == 2


def test_empty_selection_returns_nothing():
    assert _run([]) == []
    assert _run(["", "   "]) == []


def test_no_match_returns_nothing():
    assert _run(["saffron"]) == []


def test_disliked_recipes_are_excluded():
    library = RecipeLibrary()
    library.save("r3", "Roast Chicken", "dislike")
    ids = _ids(_run(["chicken"], library=library))
    assert "r3" not in ids
    assert "r4" in ids


def test_liked_and_bookmarked_recipes_are_kept():
    library = RecipeLibrary()
    library.save("r3", "Roast Chicken", "like")
    library.save("r4", "Chicken Stock", "bookmarked")
    assert set(_ids(_run(["chicken"], library=library))) == {"r3", "r4"}


def test_ranking_order():
    results = _run(["chicken", "salt"])
    assert _ids(results) == ["r3", "r4", "r2"]
    r3, r4, r2 = results
    assert (r3.primary_matches, r3.secondary_matches, r3.score) == (2, 1, 2200)
    assert (r4.primary_matches, r4.secondary_matches, r4.score) == (1, 0, 1050)
    assert (r2.primary_matches, r2.secondary_matches, r2.score) == (0, 1, 100)


def test_ranking_is_monotonic_and_has_no_zero_matches():
    results = _run(["chicken", "salt", "eggs", "water"])
    assert results
    for a, b in zip(results, results[1:]):
        if a.score <= b.score + 0.1:
            assert abs(a.score - b.score) <= 0.1
            assert a.primary_matches >= b.primary_matches
            if a.primary_matches == b.primary_matches:
                assert a.secondary_matches >= b.secondary_matches
    assert all(r.primary_matches or r.secondary_matches for r in results)


def test_results_are_deterministic():
    store = _store()
    first = _run(["chicken", "salt"], store=store)
    second = _run(["chicken", "salt"], store=store)
    assert _ids(first) == _ids(second)


def test_combined_ingredient_names_are_used():
    recipe = Recipe(
        id="x",
        title="Bread",
        ingredients=["2 cups Bread Flour"],
        normalized_ingredients=["bread flour"],
    )
    match = score_recipe(recipe, ["bread flour", "yeast"])
    assert match.primary_matches == 1
    assert match.completeness == 0.5
    assert match.total_selected == 2


def test_blank_recipe_ingredient_does_not_match_everything():
    recipe = Recipe(id="x", title="Odd", ingredients=["   ", "water"])
    assert score_recipe(recipe, ["saffron"]).primary_matches == 0


def test_near_equal_scores_fall_back_to_primary_matches():
    recipe = Recipe(id="x", title="t", ingredients=["a"])
    instruction_heavy = ScoredMatch(
        recipe=recipe, primary_matches=0, secondary_matches=11, completeness=0.0,
        score=1100.0, matched_ingredients=[], total_selected=1,
    )
    list_hit = ScoredMatch(
        recipe=recipe, primary_matches=1, secondary_matches=0, completeness=1.0,
        score=1100.05, matched_ingredients=["a"], total_selected=1,
    )
    empty = ScoredMatch(
        recipe=recipe, primary_matches=0, secondary_matches=0, completeness=0.0,
        score=0.0, matched_ingredients=[], total_selected=1,
    )
    ranked = rank_matches([instruction_heavy, empty, list_hit])
    assert ranked == [list_hit, instruction_heavy]


def test_store_unavailable_returns_empty_and_logs(caplog):
    with caplog.at_level(logging.ERROR):
        assert _run(["chicken"], store=BrokenStore()) == []
    assert "Recipe store unavailable" in caplog.text


def test_any_store_error_returns_empty(caplog):
    with caplog.at_level(logging.ERROR):
        assert _run(["salt"], store=DisconnectedStore()) == []
    assert "database connection lost" in caplog.text


def test_preference_error_returns_empty(caplog):
    with caplog.at_level(logging.ERROR):
        assert _run(["salt"], library=FailingPreferences()) == []
    assert "Recipe store unavailable" in caplog.text


def test_malformed_records_are_skipped():
    store = ListStore([
        {"id": "bad1", "title": "No ingredients", "instructions": "salt it"},
        {"id": "bad2", "title": "Odd", "ingredients": ["salt"], "instructions": ["not", "text"]},
        RECIPES[1],
    ])
    assert _ids(_run(["salt"], store=store)) == ["r2"]


def test_numeric_ids_are_strings():
    store = ListStore([{"id": 7, "title": "Stock", "ingredients": ["water"]}])
    library = RecipeLibrary()
    assert _ids(_run(["water"], store=store, library=library)) == ["7"]
    library.save("7", "Stock", "dislike")
    assert _run(["water"], store=store, library=library) == []


def test_scan_limit_bounds_the_corpus():
    config = MatchingConfig(scan_limit=2)
    assert _run(["chicken"], config=config) == []


def test_candidate_target_stops_the_scan_early():
    config = MatchingConfig(candidate_target=1)
    assert _ids(_run(["chicken"], config=config)) == ["r3"]


def test_max_results():
    config = MatchingConfig(max_results=1)
    assert len(_run(["chicken", "salt"], config=config)) == 1


@patch("recipes_backend.recommendations.matcher._yield_control", new_callable=AsyncMock)
def test_yields_only_between_chunks(mock_yield):
    config = MatchingConfig(chunk_size=1)
    _run(["saffron"], config=config)
    assert mock_yield.await_count == len(RECIPES) - 1


@patch("recipes_backend.recommendations.matcher._yield_control", new_callable=AsyncMock)
def test_single_chunk_never_yields(mock_yield):
    _run(["saffron"])
    assert mock_yield.await_count == 0
