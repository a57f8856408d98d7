from __future__ import annotations

import logging
import numbers
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .normalization import normalize_ingredient

logger = logging.getLogger(__name__)


class Recipe(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str = ""
    ingredients: list[str]
    normalized_ingredients: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("normalized_ingredients", "normalizedIngredients"),
    )
    instructions: str = ""

    @model_validator(mode="before")
    @classmethod
    def _derive_normalized_ingredients(cls, data: Any) -> Any:
        # Older imports ship without normalizedIngredients; derive them on read.
        if not isinstance(data, dict):
            return data
        normalized = data.get("normalized_ingredients") or data.get("normalizedIngredients")
        ingredients = data.get("ingredients")
        if not normalized and isinstance(ingredients, list):
            data = {
                **data,
                "normalized_ingredients": [
                    normalize_ingredient(i) for i in ingredients if isinstance(i, str)
                ],
            }
        return data

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, numbers.Integral):
            return str(int(value))
        if isinstance(value, numbers.Real):
            return str(int(value)) if float(value).is_integer() else str(value)
        return value

    @field_validator("title", "instructions", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ScoredMatch(BaseModel):
    recipe: Recipe
    primary_matches: int
    secondary_matches: int
    completeness: float
    score: float
    matched_ingredients: list[str]
    total_selected: int


class SearchHit(BaseModel):
    recipe: Recipe
    matched_count: int
    total_score: float
    title_score: float
    hit_in_title: bool
    context_snippet: str | None = None


class SuggestionRequest(BaseModel):
    ingredients: list[str] = Field(
        default_factory=list,
        description="Selected pantry ingredients; empty means use the selected pantry items",
    )


class SuggestionResponse(BaseModel):
    suggestions: list[ScoredMatch]
    selected_ingredients: list[str]


class SearchResponse(BaseModel):
    query: str
    results: list[SearchHit]


class IngredientSuggestion(BaseModel):
    name: str
    frequency: int
    score: float
    highlighted: str


def coerce_recipe(record: Any) -> Recipe | None:
    """Return *record* as a Recipe, or ``None`` when it is malformed."""
    if isinstance(record, Recipe):
        return record
    try:
        return Recipe.model_validate(record)
    except ValidationError:
        logger.debug("Skipping malformed recipe record", exc_info=True)
        return None
