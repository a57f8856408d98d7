from recipes_backend.recommendations.models import Recipe
from recipes_backend.recommendations.snippets import (
    build_context_snippet,
    extract_window,
    format_ingredients_preview,
    highlight_terms,
)


def test_highlight_is_case_insensitive_and_escaped():
    assert highlight_terms("Salt & Pepper", ["salt"]) == "<mark>Salt</mark> &amp; Pepper"


def test_highlight_prefers_longest_term():
    assert highlight_terms("olive oil", ["oil", "olive oil"]) == "<mark>olive oil</mark>"


def test_highlight_without_terms_only_escapes():
    assert highlight_terms("<b>", []) == "&lt;b&gt;"


def test_window_adds_ellipses_where_cut():
    text = "x" * 40 + "butter" + "y" * 40
    assert extract_window(text, "butter", 20) == (
        "..." + "x" * 20 + "<mark>butter</mark>" + "y" * 20 + "..."
    )


def test_window_missing_term():
    assert extract_window("flour, sugar", "salt", 20) is None


def test_snippet_prefers_ingredients():
    recipe = Recipe(
        id="1",
        title="Cake",
        ingredients=["x" * 40 + "butter" + "y" * 40],
        instructions="Melt the butter.",
    )
    assert build_context_snippet(recipe, ["butter"]) == (
        "..." + "x" * 20 + "<mark>butter</mark>" + "y" * 20 + "..."
    )


def test_snippet_falls_back_to_instructions():
    recipe = Recipe(
        id="1",
        title="Omelette",
        ingredients=["flour"],
        instructions="Whisk the eggs until fluffy",
    )
    assert build_context_snippet(recipe, ["eggs"]) == "Whisk the <mark>eggs</mark> until fluffy"


def test_snippet_limits_windows():
    recipe = Recipe(id="1", title="Mix", ingredients=["a1", "b2", "c3", "d4"])
    snippet = build_context_snippet(recipe, ["a1", "b2", "c3", "d4"])
    # Every window covers the whole short list, so count separators.
    assert snippet.count("  ") == 2


def test_snippet_none_when_nothing_found():
    recipe = Recipe(id="1", title="Mix", ingredients=["flour"])
    assert build_context_snippet(recipe, ["salt"]) is None


def test_ingredients_preview():
    assert format_ingredients_preview([]) == "No ingredients listed"
    assert format_ingredients_preview(None) == "No ingredients listed"
    assert format_ingredients_preview(["eggs", "milk"]) == "eggs, milk"
    assert format_ingredients_preview(["a" * 200], max_length=10) == "a" * 10 + "..."
