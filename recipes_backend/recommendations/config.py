"""
Tuning knobs for matching and search.

The scan limits are hard caps: recipes past the cap are never looked at.
That keeps a call bounded on a very large corpus at the cost of
completeness. Raise them through the environment when the corpus is small
enough to scan fully.
"""
from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class MatchingConfig:
    scan_limit: int = int(os.getenv("MATCH_SCAN_LIMIT", "800"))
    chunk_size: int = 50
    candidate_target: int = 150
    scoring_cap: int = 500
    max_results: int = 10
    tie_tolerance: float = 0.1
    primary_weight: float = 1000.0
    secondary_weight: float = 100.0
    completeness_weight: float = 100.0


@dataclass(frozen=True)
class SearchConfig:
    scan_limit: int = int(os.getenv("SEARCH_SCAN_LIMIT", "1000"))
    max_results: int = 15
    fuzzy_threshold: float = 0.6
    title_weight: float = 2.0
    body_weight: float = 0.3
    ingredient_radius: int = 20
    instruction_radius: int = 25
    max_snippets: int = 3


@dataclass(frozen=True)
class IngredientSearchConfig:
    min_score: float = 0.1
    max_results: int = 10
    tie_tolerance: float = 0.01


DEFAULT_MATCHING_CONFIG = MatchingConfig()
DEFAULT_SEARCH_CONFIG = SearchConfig()
DEFAULT_INGREDIENT_SEARCH_CONFIG = IngredientSearchConfig()
