from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./charsheet.db"

    # Shared roll log — "memory" keeps rolls for the life of the process,
    # "database" writes them to the shared_rolls table.
    roll_store_backend: str = "memory"
    shared_roll_limit: int = 100
    # Local per-sheet history shown next to the shared log.
    roll_history_limit: int = 50

    # Polling client used by sheets that mirror the shared log.
    shared_roll_base_url: str = "http://localhost:8000"
    shared_roll_poll_interval: float = 3.0
    shared_roll_timeout: float = 5.0

    # Extensions and other origins post rolls cross-site.
    cors_allow_origins: list[str] = ["*"]

    # Anthropic API
    anthropic_api_key: str = ""
    ai_model_generation: str = "claude-sonnet-4-6"
    ai_max_tokens: int = 4096


settings = Settings()
