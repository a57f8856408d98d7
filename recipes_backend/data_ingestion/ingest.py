from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List

import pandas as pd

from ..recommendations.normalization import normalize_ingredient
from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)

CANONICAL_COLUMNS: List[str] = [
    "id",
    "title",
    "ingredients",
    "normalizedIngredients",
    "instructions",
]

# Scraped dumps interleave ad placeholders with real ingredient lines.
_NOISE_LINES = {"advertisement"}


def _read_raw_file(path: Path) -> pd.DataFrame:
    with path.open(encoding="utf-8") as fh:
        head = fh.read(64).lstrip()
    if head.startswith("{"):
        df = pd.read_json(path, orient="index", convert_dates=False)
        df.index = df.index.astype(str)
        return df.rename_axis("source_key").reset_index()
    return pd.read_json(path, orient="records", convert_dates=False)


def _clean_lines(value: Any) -> list[str]:
    if isinstance(value, str):
        value = value.splitlines()
    if not isinstance(value, list):
        return []
    lines = [str(v).strip() for v in value if v is not None]
    return [line for line in lines if line and line.lower() not in _NOISE_LINES]


def _clean_instructions(value: Any) -> str:
    if isinstance(value, list):
        return "\n".join(str(v).strip() for v in value if v is not None and str(v).strip())
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def canonicalize(df: pd.DataFrame) -> pd.DataFrame:
    """Map a raw recipe frame onto CANONICAL_COLUMNS.

    Rows without any ingredient line are dropped; ids are de-duplicated
    keeping the first occurrence.
    """

    def _first_present(columns: List[str]) -> str | None:
        for col in columns:
            if col in df.columns:
                return col
        return None

    col_id = _first_present(["id", "recipe_id", "source_key"])
    col_title = _first_present(["title", "name", "recipe_name"])
    col_ingredients = _first_present(["ingredients", "ingredient_list"])
    col_normalized = _first_present(["normalizedIngredients", "normalized_ingredients"])
    col_instructions = _first_present(["instructions", "directions", "steps", "method"])

    if col_ingredients is None:
        return pd.DataFrame(columns=CANONICAL_COLUMNS)

    canonical = pd.DataFrame(index=df.index)
    canonical["id"] = df[col_id].astype(str) if col_id else df.index.astype(str)
    canonical["title"] = df[col_title].fillna("").astype(str).str.strip() if col_title else ""
    canonical["ingredients"] = df[col_ingredients].apply(_clean_lines)
    canonical["instructions"] = (
        df[col_instructions].apply(_clean_instructions) if col_instructions else ""
    )

    derived = canonical["ingredients"].apply(lambda lines: [normalize_ingredient(i) for i in lines])
    if col_normalized:
        given = df[col_normalized].apply(
            lambda v: [normalize_ingredient(i) for i in _clean_lines(v)]
        )
        canonical["normalizedIngredients"] = pd.Series(
            [g if g else d for g, d in zip(given, derived)],
            index=canonical.index,
            dtype=object,
        )
    else:
        canonical["normalizedIngredients"] = derived

    canonical = canonical[canonical["ingredients"].apply(len) > 0]
    canonical = canonical.drop_duplicates(subset="id", keep="first")
    return canonical[CANONICAL_COLUMNS].reset_index(drop=True)


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> Path:
    """
    Execute the ingestion pipeline.

    Steps:
    - Read every raw JSON dump in the raw data directory.
    - Map raw fields into the canonical Recipe record.
    - Persist the cleaned corpus as JSON for the recipe store.
    """

    config.raw_data_dir.mkdir(parents=True, exist_ok=True)
    config.processed_data_dir.mkdir(parents=True, exist_ok=True)

    raw_files = sorted(config.raw_data_dir.glob(config.raw_glob))
    if not raw_files:
        raise FileNotFoundError(f"No raw recipe files matching {config.raw_glob} in {config.raw_data_dir}")

    frames = [canonicalize(_read_raw_file(path)) for path in raw_files]
    combined = pd.concat(frames, ignore_index=True).drop_duplicates(subset="id", keep="first")

    output_path = config.processed_path
    combined.to_json(output_path, orient="records", force_ascii=False)
    logger.info("Wrote %d recipes from %d raw files to %s", len(combined), len(raw_files), output_path)
    return output_path


if __name__ == "__main__":
    path = run_ingestion()
    print(f"Ingestion complete. Processed data saved to: {path}")
