from __future__ import annotations

from pydantic import BaseModel, Field


class Substitution(BaseModel):
    raw: str
    normalized: str


class SubstitutionResult(BaseModel):
    substitutions: list[Substitution]
    explanation: str


class SubstitutionRequest(BaseModel):
    ingredient: str = Field(..., min_length=1, description="Ingredient line to replace")
    prompt: str = Field(..., min_length=1, max_length=500, description="What the user wants instead")


class RecipeDraft(BaseModel):
    """Working copy of a recipe in the editor; nothing is stored until saved."""

    source_id: str
    title: str
    ingredients: list[str]
    normalized_ingredients: list[str]
    instructions: str = ""
    is_fork: bool = False


class IngredientEdit(BaseModel):
    """One line change. With *normalized* set it is an accepted substitution."""

    index: int = Field(..., ge=0)
    text: str
    normalized: str | None = None


class SaveRecipeRequest(BaseModel):
    title: str | None = None
    ingredients: list[str] | None = Field(default=None, min_length=1)
    normalized_ingredients: list[str] | None = None
    edits: list[IngredientEdit] = Field(default_factory=list)
    fork: bool = False
