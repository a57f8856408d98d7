from __future__ import annotations

import itertools

from .models import PantryItem


class Pantry:
    """Ingredients the user keeps on hand, with a per-item selection flag."""

    def __init__(self) -> None:
        self._items: dict[int, PantryItem] = {}
        self._ids = itertools.count(1)

    def add(self, ingredient: str) -> PantryItem:
        item = PantryItem(id=next(self._ids), ingredient=ingredient.strip())
        self._items[item.id] = item
        return item

    def delete(self, item_id: int) -> bool:
        return self._items.pop(item_id, None) is not None

    def items(self) -> list[PantryItem]:
        return list(self._items.values())

    def toggle(self, item_id: int) -> PantryItem | None:
        item = self._items.get(item_id)
        if item is None:
            return None
        updated = item.model_copy(update={"selected": not item.selected})
        self._items[item_id] = updated
        return updated

    def toggle_all(self) -> bool:
        """Select everything, or deselect everything when all are already selected.

        Returns the new selection state.
        """
        all_selected = bool(self._items) and all(i.selected for i in self._items.values())
        target = not all_selected
        for item_id, item in self._items.items():
            self._items[item_id] = item.model_copy(update={"selected": target})
        return target

    def selected_ingredients(self) -> list[str]:
        return [i.ingredient.lower() for i in self._items.values() if i.selected and i.ingredient]

    def clear(self) -> None:
        self._items.clear()
        self._ids = itertools.count(1)


_pantry = Pantry()


def get_pantry() -> Pantry:
    return _pantry


def clear_pantry() -> None:
    _pantry.clear()
