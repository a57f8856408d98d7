from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_DATA_DIR = Path(__file__).resolve().parent.parent / "data" / "processed"


@dataclass(frozen=True)
class StoreConfig:
    recipes_path: Path = Path(os.getenv("RECIPES_PATH", str(_DATA_DIR / "recipes.json")))
    preview_length: int = 150


DEFAULT_STORE_CONFIG = StoreConfig()
