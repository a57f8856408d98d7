"""
Recipe matching and search engines.

Responsibilities:
- Rank stored recipes against a pantry ingredient selection.
- Search recipe titles, ingredients and instructions for free text.
- Autocomplete ingredient names from the ingredient index.
- Shape results (scores, snippets, highlights) ready for API serialisation.
"""
