from __future__ import annotations

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="LOCATOR_", extra="ignore")

    headless: bool = True
    user_data_dir: str | None = None
    navigation_timeout_ms: int = 30000
    hydrate_wait_ms: int = 1500
    log_level: str = "INFO"
    max_results: int = 10
    proximity_threshold: float = 200.0
    include_hidden: bool = False

def get_settings() -> Settings:
    return Settings()


settings = get_settings()
