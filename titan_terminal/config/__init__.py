"""
Application Settings
Load from environment variables
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # ======================
    # Position storage
    # ======================
    STORAGE_BACKEND: str = "memory"  # memory | file | redis
    STORAGE_KEY: str = "titan_terminal_assets"
    STORAGE_FILE: str = "data/titan_terminal.json"

    # ======================
    # Redis
    # ======================
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_PREFIX: str = "titan:"

    # ======================
    # Simulated market stream
    # ======================
    STREAM_ENABLED: bool = True
    STREAM_TICK_INTERVAL_MS: int = 400
    STREAM_SEED: Optional[int] = None
    QUOTE_BAR_WINDOW: int = 240

    # ======================
    # Display
    # ======================
    DEFAULT_CURRENCY: str = "USD"

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )


settings = Settings()
