from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Query

from .editing.editor import accept_substitution, manual_edit, open_draft, rename, save_draft
from .editing.models import (
    SaveRecipeRequest,
    Substitution,
    SubstitutionRequest,
    SubstitutionResult,
)
from .llm.groq_client import SubstitutionError, SubstitutionUnavailable, suggest_substitutions
from .recommendations.cache import ResultHandle, cache_get, cache_set, get_cache_stats
from .recommendations.ingredient_search import search_ingredients
from .recommendations.matcher import find_matching_recipes
from .recommendations.models import (
    IngredientSuggestion,
    Recipe,
    ScoredMatch,
    SearchResponse,
    SuggestionRequest,
    SuggestionResponse,
)
from .recommendations.normalization import normalize_ingredient, normalize_selection
from .recommendations.search import search_recipes
from .recommendations.snippets import format_ingredients_preview
from .store.config import DEFAULT_STORE_CONFIG
from .store.errors import StoreUnavailable
from .store.ingredient_index import get_ingredient_index
from .store.library import get_library
from .store.models import (
    ImportRequest,
    ImportResponse,
    LibraryEntry,
    LibraryEntryOut,
    LibraryUpdateRequest,
    PantryAddRequest,
    PantryItem,
)
from .store.pantry import get_pantry
from .store.recipe_store import get_recipe_store

logger = logging.getLogger(__name__)

app = FastAPI(title="Pantry Recipe API", version="1.0.0")

# Latest suggestions, kept for the client's convenience. Late answers to an
# older request never overwrite a newer one.
_latest_suggestions: ResultHandle[ScoredMatch] = ResultHandle()


def _get_recipe_or_404(recipe_id: str) -> Recipe:
    recipe = get_recipe_store().get_recipe_by_id(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    index = get_ingredient_index()
    return {
        "recipes": len(get_recipe_store()),
        "ingredients": len(index),
        "top_ingredients": [e.model_dump() for e in index.entries()[:20]],
    }


# ── Recipes ──────────────────────────────────────────────────────────────


@app.post("/recipes/import", response_model=ImportResponse)
def import_recipes(body: ImportRequest) -> ImportResponse:
    store = get_recipe_store()
    loaded = store.bulk_load(body.recipes)
    ingredients = get_ingredient_index().recalculate(store.list_recipes())
    return ImportResponse(
        loaded=loaded,
        skipped=len(body.recipes) - loaded,
        ingredients=ingredients,
    )


@app.get("/recipes/{recipe_id}", response_model=Recipe)
def get_recipe(recipe_id: str) -> Recipe:
    return _get_recipe_or_404(recipe_id)


@app.post("/suggestions", response_model=SuggestionResponse)
async def suggestions(body: SuggestionRequest) -> SuggestionResponse:
    selected = normalize_selection(body.ingredients or get_pantry().selected_ingredients())

    try:
        recipes_rev = get_recipe_store().revision
    except StoreUnavailable:
        logger.error("Recipe store unavailable, returning no suggestions", exc_info=True)
        return SuggestionResponse(suggestions=[], selected_ingredients=selected)

    request_dict = {
        "kind": "suggestions",
        "ingredients": selected,
        "_recipes_rev": recipes_rev,
        "_library_rev": get_library().revision,
    }
    token = _latest_suggestions.begin(selected)
    cached = cache_get(request_dict)
    if cached is not None:
        _latest_suggestions.publish(token, cached.suggestions)
        return cached

    results = await find_matching_recipes(selected)
    _latest_suggestions.publish(token, results)

    response = SuggestionResponse(suggestions=results, selected_ingredients=selected)
    cache_set(request_dict, response)
    return response


@app.get("/suggestions/latest", response_model=SuggestionResponse)
def latest_suggestions() -> SuggestionResponse:
    return SuggestionResponse(
        suggestions=_latest_suggestions.results,
        selected_ingredients=_latest_suggestions.query or [],
    )


@app.get("/search", response_model=SearchResponse)
def search(q: str = Query(default="", max_length=200)) -> SearchResponse:
    return SearchResponse(query=q, results=search_recipes(q))


@app.get("/ingredients/search", response_model=list[IngredientSuggestion])
def ingredient_search(q: str = Query(default="", max_length=100)) -> list[IngredientSuggestion]:
    return search_ingredients(q)


# ── Pantry ───────────────────────────────────────────────────────────────


@app.get("/pantry", response_model=list[PantryItem])
def pantry_items() -> list[PantryItem]:
    return get_pantry().items()


@app.post("/pantry", response_model=PantryItem)
def add_pantry_item(body: PantryAddRequest) -> PantryItem:
    if not body.ingredient.strip():
        raise HTTPException(status_code=422, detail="Ingredient name is required")
    return get_pantry().add(body.ingredient)


@app.post("/pantry/select-all")
def toggle_all_pantry_items() -> dict[str, bool]:
    return {"selected": get_pantry().toggle_all()}


@app.post("/pantry/{item_id}/toggle", response_model=PantryItem)
def toggle_pantry_item(item_id: int) -> PantryItem:
    item = get_pantry().toggle(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Pantry item not found")
    return item


@app.delete("/pantry/{item_id}")
def delete_pantry_item(item_id: int) -> dict[str, str]:
    if not get_pantry().delete(item_id):
        raise HTTPException(status_code=404, detail="Pantry item not found")
    return {"status": "deleted"}


# ── Library ──────────────────────────────────────────────────────────────


@app.get("/library", response_model=list[LibraryEntryOut])
def library_entries() -> list[LibraryEntryOut]:
    store = get_recipe_store()
    out: list[LibraryEntryOut] = []
    for entry in get_library().entries():
        recipe = store.get_recipe_by_id(entry.id)
        out.append(LibraryEntryOut(
            **entry.model_dump(),
            ingredients_preview=format_ingredients_preview(
                recipe.ingredients if recipe else None,
                DEFAULT_STORE_CONFIG.preview_length,
            ),
        ))
    return out


@app.put("/library/{recipe_id}", response_model=LibraryEntry)
def set_library_status(recipe_id: str, body: LibraryUpdateRequest) -> LibraryEntry:
    title = body.title
    if title is None:
        recipe = get_recipe_store().get_recipe_by_id(recipe_id)
        title = recipe.title if recipe else None
    return get_library().save(recipe_id, title, body.status)


@app.post("/library/{recipe_id}/like")
def toggle_like(recipe_id: str) -> dict:
    recipe = _get_recipe_or_404(recipe_id)
    status = get_library().toggle_like(recipe.id, recipe.title)
    return {"id": recipe.id, "status": status.value if status else None}


@app.delete("/library/{recipe_id}")
def remove_from_library(recipe_id: str) -> dict[str, str]:
    if not get_library().remove(recipe_id):
        raise HTTPException(status_code=404, detail="Recipe not in library")
    return {"status": "removed"}


# ── Editing ──────────────────────────────────────────────────────────────


@app.post("/recipes/{recipe_id}/substitutions", response_model=SubstitutionResult)
def substitutions(recipe_id: str, body: SubstitutionRequest) -> SubstitutionResult:
    recipe = _get_recipe_or_404(recipe_id)
    try:
        return suggest_substitutions(recipe, body.ingredient, body.prompt)
    except SubstitutionUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except SubstitutionError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@app.post("/recipes/{recipe_id}/save", response_model=Recipe)
def save_recipe(recipe_id: str, body: SaveRecipeRequest) -> Recipe:
    recipe = _get_recipe_or_404(recipe_id)
    draft = open_draft(recipe, is_fork=body.fork)
    if body.title is not None:
        draft = rename(draft, body.title)

    if body.ingredients is not None:
        normalized = body.normalized_ingredients
        if normalized is None or len(normalized) != len(body.ingredients):
            normalized = [normalize_ingredient(i) for i in body.ingredients]
        draft = draft.model_copy(update={
            "ingredients": list(body.ingredients),
            "normalized_ingredients": list(normalized),
        })

    try:
        for edit in body.edits:
            if edit.normalized is None:
                draft = manual_edit(draft, edit.index, edit.text)
            else:
                substitution = Substitution(raw=edit.text, normalized=edit.normalized)
                draft = accept_substitution(draft, edit.index, substitution)
    except IndexError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return save_draft(draft)


# ── Admin ────────────────────────────────────────────────────────────────


@app.get("/cache/stats")
def cache_stats() -> dict:
    return get_cache_stats()
