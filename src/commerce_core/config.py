"""
Runtime settings, read from COMMERCE_ANALYTICS_* environment variables or a .env file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the dashboard and the export loader."""

    model_config = SettingsConfigDict(
        env_prefix="COMMERCE_ANALYTICS_", env_file=".env", case_sensitive=False
    )

    # Directory holding orders.json, products.csv and users.csv
    data_dir: Path = Path("data/raw")

    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
