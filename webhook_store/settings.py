from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=0, le=65535)
    # 0 keeps every webhook
    max_size: int = Field(default=5, ge=0)
    echo_stored: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="WEBHOOK_STORE_", env_file=".env", extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
