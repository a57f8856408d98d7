import pytest

from recipes_backend.editing.editor import (
    accept_substitution,
    manual_edit,
    open_draft,
    rename,
    save_draft,
)
from recipes_backend.editing.models import Substitution
from recipes_backend.recommendations.models import Recipe
from recipes_backend.store.ingredient_index import IngredientIndex
from recipes_backend.store.library import RecipeLibrary
from recipes_backend.store.models import LibraryStatus
from recipes_backend.store.recipe_store import RecipeStore

PANCAKES = Recipe(
    id="r1",
    title="Pancakes",
    ingredients=["2 Eggs", "1 cup milk"],
    instructions="Whisk and fry.",
)


@pytest.fixture
def deps():
    store = RecipeStore()
    store.bulk_load([PANCAKES])
    index = IngredientIndex()
    index.recalculate(store.list_recipes())
    return store, RecipeLibrary(), index


def test_open_draft_copies_recipe():
    draft = open_draft(PANCAKES)
    assert draft.source_id == "r1"
    assert draft.ingredients == PANCAKES.ingredients
    assert draft.normalized_ingredients == ["2 eggs", "1 cup milk"]
    assert not draft.is_fork


def test_rename_ignores_blank():
    draft = open_draft(PANCAKES)
    assert rename(draft, "   ").title == "Pancakes"
    assert rename(draft, " Crepes ").title == "Crepes"


def test_manual_edit():
    draft = manual_edit(open_draft(PANCAKES), 1, " 1 cup Oat Milk ")
    assert draft.ingredients[1] == "1 cup Oat Milk"
    assert draft.normalized_ingredients[1] == "1 cup oat milk"
    assert manual_edit(draft, 1, "  ") == draft


def test_manual_edit_out_of_range():
    with pytest.raises(IndexError):
        manual_edit(open_draft(PANCAKES), 5, "salt")


def test_accept_substitution():
    draft = accept_substitution(
        open_draft(PANCAKES), 1, Substitution(raw="1 cup almond milk", normalized="almond milk")
    )
    assert draft.ingredients == ["2 Eggs", "1 cup almond milk"]
    assert draft.normalized_ingredients == ["2 eggs", "almond milk"]


def test_save_edit_replaces_recipe(deps):
    store, library, index = deps
    draft = accept_substitution(
        open_draft(PANCAKES), 1, Substitution(raw="1 cup almond milk", normalized="almond milk")
    )
    saved = save_draft(draft, recipe_store=store, library=library, index=index)

    assert saved.id == "r1"
    assert len(store) == 1
    assert store.get_recipe_by_id("r1").ingredients[1] == "1 cup almond milk"
    assert index.frequency("1 cup milk") == 0
    assert index.frequency("almond milk") == 1
    assert library.get_status("r1") is LibraryStatus.like


def test_save_fork_adds_new_recipe(deps):
    store, library, index = deps
    draft = rename(open_draft(PANCAKES, is_fork=True), "Vegan Pancakes")
    saved = save_draft(draft, recipe_store=store, library=library, index=index)

    assert saved.id.startswith("fork-")
    assert saved.title == "Vegan Pancakes"
    assert len(store) == 2
    assert store.get_recipe_by_id("r1") == PANCAKES
    assert index.frequency("2 eggs") == 2
    assert library.get_status(saved.id) is LibraryStatus.like


def test_two_forks_get_distinct_ids(deps):
    store, library, index = deps
    draft = open_draft(PANCAKES, is_fork=True)
    first = save_draft(draft, recipe_store=store, library=library, index=index)
    second = save_draft(draft, recipe_store=store, library=library, index=index)
    assert first.id != second.id
    assert len(store) == 3
