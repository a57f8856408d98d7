from __future__ import annotations

import html
import re
from collections.abc import Sequence

from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .models import Recipe

ELLIPSIS = "..."
SNIPPET_SEPARATOR = "  "


def highlight_terms(text: str, terms: Sequence[str]) -> str:
    """HTML-escape *text* and wrap every case-insensitive term hit in ``<mark>``."""
    terms = [t for t in terms if t]
    if not terms:
        return html.escape(text)
    # Longest first so "olive oil" wins over "oil".
    pattern = re.compile(
        "|".join(re.escape(t) for t in sorted(terms, key=len, reverse=True)),
        re.IGNORECASE,
    )
    parts: list[str] = []
    last = 0
    for match in pattern.finditer(text):
        parts.append(html.escape(text[last:match.start()]))
        parts.append(f"<mark>{html.escape(match.group(0))}</mark>")
        last = match.end()
    parts.append(html.escape(text[last:]))
    return "".join(parts)


def extract_window(
    text: str,
    term: str,
    radius: int,
    highlight: Sequence[str] = (),
) -> str | None:
    """Text around the first occurrence of *term*, with ellipses where cut."""
    lowered = text.lower()
    index = lowered.find(term)
    if index < 0:
        return None
    # lower() can change the length of some characters; fall back to lowered text.
    source = text if len(lowered) == len(text) else lowered
    start = max(0, index - radius)
    end = min(len(source), index + len(term) + radius)
    prefix = ELLIPSIS if start > 0 else ""
    suffix = ELLIPSIS if end < len(source) else ""
    return f"{prefix}{highlight_terms(source[start:end], highlight or [term])}{suffix}"


def build_context_snippet(
    recipe: Recipe,
    terms: Sequence[str],
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> str | None:
    """Show where body-matched *terms* occur, preferring the ingredient list.

    Instructions are only used when none of the terms occur in the
    ingredients. At most ``config.max_snippets`` windows are joined.
    """
    ingredients_text = ", ".join(recipe.ingredients)
    text, radius = ingredients_text, config.ingredient_radius
    found = [t for t in terms if t in ingredients_text.lower()]
    if not found:
        text, radius = recipe.instructions, config.instruction_radius
        found = [t for t in terms if t in text.lower()]
    if not found:
        return None

    windows = [
        extract_window(text, term, radius, highlight=found)
        for term in found[: config.max_snippets]
    ]
    return SNIPPET_SEPARATOR.join(w for w in windows if w)


def format_ingredients_preview(ingredients: Sequence[str] | None, max_length: int = 150) -> str:
    if not ingredients:
        return "No ingredients listed"
    joined = ", ".join(ingredients)
    if len(joined) <= max_length:
        return joined
    return joined[:max_length] + ELLIPSIS
