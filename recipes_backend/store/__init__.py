"""
Local recipe storage.

Responsibilities:
- Hold the imported recipe corpus in process, in stable insertion order.
- Track the user's recipe library (like / dislike / bookmarked).
- Track pantry ingredients and which of them are selected.
- Maintain the ingredient frequency index used for autocomplete.
"""
