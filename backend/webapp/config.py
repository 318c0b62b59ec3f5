"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8085
    DEBUG: bool = False
    LOG_LEVEL: str = "info"

    # Set by `webapp test` for the child test process
    WEBAPP_IS_TEST: bool = False

    # Project layout
    PUBLIC_DIR: str = "./public"
    WIDGETS_PATH: str = "./lib/widgets"
    LANGUAGE_PATH: str = "./lib/languages"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
