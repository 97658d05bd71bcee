"""
Application configuration using Pydantic Settings.
All configuration values can be overridden via environment variables or .env file.
"""
from pydantic_settings import BaseSettings
from pathlib import Path
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    app_name: str = "Prompt Library API"
    app_version: str = "1.0.0"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    configure_logging: bool = True

    # Database (embedded SQLite file, or ":memory:" for a throwaway store)
    database_path: str = "data/prompts.db"
    database_echo: bool = False
    seed_on_startup: bool = True

    # HTTP server
    host: str = "127.0.0.1"
    port: int = 3001
    cors_allow_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def database_url(self) -> str:
        """SQLAlchemy async URL for the configured database path."""
        if self.database_path == ":memory:":
            return "sqlite+aiosqlite:///:memory:"
        return f"sqlite+aiosqlite:///{Path(self.database_path).expanduser()}"

    def is_in_memory(self) -> bool:
        """Check whether the store lives only in memory."""
        return self.database_path == ":memory:"


# Global settings instance (lazily initialized)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
