"""Application settings using Pydantic Settings."""

from pathlib import Path
from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv


def find_and_load_env_file():
    """Find and load .env file in current directory or parent directories."""
    search_paths = [
        Path.cwd(),
        Path(__file__).parent.parent.parent.parent.parent,  # Project root
    ]

    for start_path in search_paths:
        current = start_path.resolve()
        # Check current directory and up to 3 levels up
        for _ in range(4):
            env_path = current / ".env"
            if env_path.exists():
                load_dotenv(env_path, override=False)
                return str(env_path)
            parent = current.parent
            if parent == current:  # Reached root
                break
            current = parent
    return None


find_and_load_env_file()


class Settings(BaseSettings):
    """Application configuration settings."""

    # Materialization
    max_passes: int = Field(default=5, ge=1)
    ordering_field: str = "createdAt"
    ordering_offset_seconds: float = 1.0

    # Placeholder values
    faker_locale: str = "en_US"
    faker_seed: Optional[int] = None

    # Persistence
    store_backend: Literal["memory", "duckdb"] = "duckdb"
    database_path: Path = Path("seed.duckdb")
    export_dir: Optional[Path] = None

    # Logging Configuration
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_file=None,  # We load it manually with dotenv
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **kwargs):
        """Initialize settings and create parent directories if needed."""
        find_and_load_env_file()
        super().__init__(**kwargs)
        if self.store_backend == "duckdb" and str(self.database_path) != ":memory:":
            self.database_path = Path(self.database_path)
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        if self.log_file:
            self.log_file = Path(self.log_file)
            self.log_file.parent.mkdir(parents=True, exist_ok=True)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
