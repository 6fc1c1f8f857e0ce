# customer_insights/core/settings.py
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# .../customer_insights/core/settings.py -> parents[1] = .../customer_insights
PACKAGE_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_DATASET_PATH = PACKAGE_ROOT / "data" / "customer_details.json"


class Settings(BaseSettings):
    APP_NAME: str = "Customer Insights"
    APP_VERSION: str = "0.1.0"

    # --- Dataset ---
    DATASET_PATH: Path = Field(
        DEFAULT_DATASET_PATH, description="JSON document holding the customers array"
    )

    # --- Query engine ---
    QUERY_MAX_WORKERS: int = Field(4, ge=1, description="Thread pool size for parallel queries")
    QUERY_PARTITION_SIZE: Optional[int] = Field(
        None, ge=1, description="Items per partition; None = split evenly over the workers"
    )

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    # --- HTTP ---
    ALLOWED_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()  # reads .env
