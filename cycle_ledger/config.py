"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (handled reminder acknowledgements only)
    database_url: str = "sqlite:///./cycle_ledger.db"

    # External Services
    store_api_base: str = "http://localhost:8001"

    # Service
    service_name: str = "cycle-ledger"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Cycle engine
    max_cycle_periods: int = 240  # 20 years of monthly statements


settings = Settings()
