"""Application configuration."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings are loaded in this priority order (highest to lowest):
    1. Environment variables
    2. .env file (for local development)
    3. Default values

    The CLI uses these values as defaults for its options.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    app_name: str = "Call Map API"
    debug: bool = False
    log_level: str = "info"

    # =========================================================================
    # Call map data
    # =========================================================================
    callmap_dir: Path = Field(
        default=Path("dictionaries"),
        description="Directory holding CallMap.json and CallMap_<NN>_delta.json files",
    )
    callmap_baseline_file: str = Field(
        default="CallMap.json",
        description="Baseline table file name inside callmap_dir",
    )
    # Ascending. The newest entry is the baseline version; each delta file's
    # older side is the entry preceding its newer side.
    supported_versions: list[str] = Field(
        default=[
            "7.0",
            "7.1",
            "7.2",
            "7.3",
            "7.4",
            "8.0",
            "8.1",
            "8.2",
            "8.3",
            "8.4",
        ],
        description="Supported runtime versions, oldest first",
    )

    # =========================================================================
    # CORS
    # =========================================================================
    cors_origins: list[str] = ["http://localhost:3000"]

    # =========================================================================
    # API Settings
    # =========================================================================
    api_v1_prefix: str = "/api/v1"


settings = Settings()
