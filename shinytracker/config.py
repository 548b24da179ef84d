from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Shiny Tracker"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/shinytracker"

    # Remote authority the offline client syncs against
    api_base_url: str = "http://localhost:8000/api"

    pokeapi_url: str = "https://pokeapi.co/api/v2"

    # Local snapshot directory (hunts, pending ops, species cache)
    state_dir: Path = Path(".shinytracker")

    request_timeout: float = 10.0

    # Delay before a counter change is pushed; restarted on every change.
    # 0 pushes immediately.
    counter_debounce_seconds: float = 0.3

    # Transient failures tolerated per queued operation before it is dropped
    max_sync_attempts: int = 5

    species_cache_ttl_seconds: int = 24 * 60 * 60
    species_list_limit: int = 1025


settings = Settings()
