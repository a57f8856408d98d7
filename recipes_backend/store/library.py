from __future__ import annotations

import logging
from typing import Protocol

from .models import LibraryEntry, LibraryStatus

logger = logging.getLogger(__name__)


class PreferenceSource(Protocol):
    def list_ids_by_status(self, status: LibraryStatus | str) -> set[str]: ...


class RecipeLibrary:
    """Per-recipe like / dislike / bookmarked status. One entry per recipe id."""

    def __init__(self) -> None:
        self._entries: dict[str, LibraryEntry] = {}
        self.revision = 0

    def save(self, recipe_id: str, title: str | None, status: LibraryStatus | str) -> LibraryEntry:
        if recipe_id is None or str(recipe_id) == "":
            raise ValueError("Recipe ID is required to save to library")
        clean_title = str(title).strip() if title is not None else ""
        entry = LibraryEntry(
            id=str(recipe_id),
            title=clean_title or "Untitled",
            status=LibraryStatus(status),
        )
        self._entries[entry.id] = entry
        self.revision += 1
        logger.debug("Saved %s for recipe %s", entry.status.value, entry.id)
        return entry

    def get_status(self, recipe_id: str) -> LibraryStatus | None:
        entry = self._entries.get(str(recipe_id))
        return entry.status if entry else None

    def list_ids_by_status(self, status: LibraryStatus | str) -> set[str]:
        wanted = LibraryStatus(status)
        return {e.id for e in self._entries.values() if e.status is wanted}

    def remove(self, recipe_id: str) -> bool:
        removed = self._entries.pop(str(recipe_id), None) is not None
        if removed:
            self.revision += 1
        return removed

    def entries(self) -> list[LibraryEntry]:
        return list(self._entries.values())

    def auto_like(self, recipe_id: str, title: str | None) -> LibraryEntry:
        return self.save(recipe_id, title, LibraryStatus.like)

    def toggle_like(self, recipe_id: str, title: str | None) -> LibraryStatus | None:
        """Like a recipe, or drop the entry when it is already liked."""
        if self.get_status(recipe_id) is LibraryStatus.like:
            self.remove(recipe_id)
            return None
        return self.save(recipe_id, title, LibraryStatus.like).status

    def clear(self) -> None:
        self._entries.clear()
        self.revision += 1


_library = RecipeLibrary()


def get_library() -> RecipeLibrary:
    return _library


def clear_library() -> None:
    _library.clear()
