from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "pricecheck"

    # Persistence
    storage_backend: str = "file"  # file or memory
    data_dir: str = ".pricecheck"
    categories_key: str = "@categories"
    persist_in_background: bool = True

    # Engine
    selection_limit: int = 5
    currency_symbol: str = "$"

    # Server
    host: str = "127.0.0.1"
    port: int = 8085
    log_level: str = "INFO"

    # SDK / CLI
    api_url: str = "http://127.0.0.1:8085"

    model_config = SettingsConfigDict(
        env_prefix="PRICECHECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
