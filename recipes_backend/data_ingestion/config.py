from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class IngestionConfig:
    """
    Configuration for the recipe ingestion pipeline.
    """

    raw_data_dir: Path = Path("recipes_backend/data/raw")
    raw_glob: str = "*.json"
    processed_data_dir: Path = Path("recipes_backend/data/processed")
    processed_filename: str = "recipes.json"

    @property
    def processed_path(self) -> Path:
        return self.processed_data_dir / self.processed_filename


DEFAULT_INGESTION_CONFIG = IngestionConfig()
