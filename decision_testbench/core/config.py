"""Application configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    app_name: str = "Decision Testbench"
    log_level: str = "INFO"

    # Paths
    rules_directory: str = "rules"
    rules_repositories: str | None = None

    # Scenario generation
    default_scenario_count: int = 10

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def engine_available() -> bool:
    """Check if the optional decision engine bindings are installed."""
    try:
        import zen  # noqa: F401
        return True
    except ImportError:
        return False
