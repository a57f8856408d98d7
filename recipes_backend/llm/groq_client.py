from __future__ import annotations

import json
import logging
from typing import Any

from groq import Groq

from ..editing.models import Substitution, SubstitutionResult
from ..recommendations.models import Recipe
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a recipe ingredient substitution assistant. Given a recipe "
    "(title and ingredients), one ingredient to substitute, and the user's "
    "preference prompt, suggest 3-5 alternative ingredients.\n\n"
    "You must reply with exactly one JSON object and nothing else. No markdown, "
    "no code fences, no explanation outside the JSON.\n\n"
    "Format:\n"
    '{"substitutions": [{"raw": "1 cup almond milk", "normalized": "almond milk"}, '
    '{"raw": "2 tbsp coconut cream", "normalized": "coconut cream"}], '
    '"explanation": "One short paragraph explaining why these fit."}\n\n'
    "Rules:\n"
    '- "substitutions": array of 3-5 objects. Each object MUST have exactly two string fields:\n'
    '  - "raw": the full ingredient with quantity as it would appear in a recipe '
    '(e.g. "2 tbsp olive oil", "1 cup skim milk"). Match the quantity/unit style '
    "of the original ingredient being replaced.\n"
    '  - "normalized": just the ingredient name without any quantity or unit '
    '(e.g. "olive oil", "skim milk").\n'
    '- "explanation": one string, a short paragraph.\n\n'
    "Output only valid JSON so the UI can parse it."
)


class SubstitutionUnavailable(Exception):
    """No API key configured, or the LLM is switched off."""


class SubstitutionError(Exception):
    """The LLM call failed or its reply held no usable substitutions."""


def _build_user_message(
    recipe: Recipe,
    ingredient: str,
    user_prompt: str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> str:
    preview = ", ".join(recipe.ingredients[: config.preview_ingredients])
    return (
        f'Recipe: "{recipe.title or "Untitled"}". '
        f'Ingredients: "{preview}". '
        f'Substitute this ingredient: "{ingredient}". '
        f'User preference: "{user_prompt}".'
    )


def _coerce_result(parsed: Any) -> SubstitutionResult | None:
    if not isinstance(parsed, dict):
        return None
    items = parsed.get("substitutions")
    explanation = parsed.get("explanation")
    if not isinstance(items, list) or not items or not isinstance(explanation, str):
        return None

    substitutions: list[Substitution] = []
    for item in items:
        if isinstance(item, dict) and isinstance(item.get("raw"), str) and isinstance(item.get("normalized"), str):
            substitutions.append(Substitution(raw=item["raw"], normalized=item["normalized"]))
        elif isinstance(item, str):
            substitutions.append(Substitution(raw=item, normalized=item.lower().strip()))
    if not substitutions:
        return None
    return SubstitutionResult(substitutions=substitutions, explanation=explanation)


def parse_substitution_response(message: str | None) -> SubstitutionResult | None:
    """Pull the substitution JSON out of an LLM reply.

    Reasoning models tend to put the JSON object last, so candidate objects
    are tried starting from the final ``{``.
    """
    text = (message or "").strip()
    end = len(text)
    while end > 0:
        start = text.rfind("{", 0, end)
        if start == -1:
            break
        try:
            result = _coerce_result(json.loads(text[start:]))
        except json.JSONDecodeError:
            result = None
        if result is not None:
            return result
        end = start
    return None


def suggest_substitutions(
    recipe: Recipe,
    ingredient: str,
    user_prompt: str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> SubstitutionResult:
    """Ask Groq for 3-5 replacements for *ingredient* in *recipe*."""
    if not config.enabled or not config.api_key:
        raise SubstitutionUnavailable("Substitutions need GROQ_API_KEY to be set")

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": _build_user_message(recipe, ingredient, user_prompt, config),
                },
            ],
            max_tokens=config.max_tokens,
            temperature=0.3,
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content or ""
    except Exception as exc:
        logger.warning("Groq substitution call failed", exc_info=True)
        raise SubstitutionError("Failed to get substitutions") from exc

    result = parse_substitution_response(content)
    if result is None:
        logger.warning("Groq returned an unusable substitution reply")
        raise SubstitutionError("Invalid substitution response from LLM")
    return result
