from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class LibraryStatus(str, Enum):
    like = "like"
    dislike = "dislike"
    bookmarked = "bookmarked"


class LibraryEntry(BaseModel):
    id: str
    title: str
    status: LibraryStatus


class LibraryEntryOut(LibraryEntry):
    ingredients_preview: str


class LibraryUpdateRequest(BaseModel):
    status: LibraryStatus
    title: str | None = None


class PantryItem(BaseModel):
    id: int
    ingredient: str
    selected: bool = False


class PantryAddRequest(BaseModel):
    ingredient: str = Field(..., min_length=1, max_length=200)


class IngredientCount(BaseModel):
    name: str
    frequency: int


class ImportRequest(BaseModel):
    recipes: list[dict[str, Any]]


class ImportResponse(BaseModel):
    loaded: int
    skipped: int
    ingredients: int
