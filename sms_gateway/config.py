"""Configuration management using Pydantic Settings"""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./sms_gateway.db"

    # Service
    service_name: str = "sms-gateway"
    log_level: str = "INFO"

    # Ingestion
    transaction_mode: Literal["manual", "automatic"] = "manual"
    require_trusted_sender: bool = True
    category_taxonomy_path: Optional[str] = None  # JSON list of {id, name, keywords}

    # Duplicate detection windows
    receive_cache_window_minutes: int = 30
    receive_cache_max_entries: int = 1024
    persisted_duplicate_window_seconds: int = 120
    fallback_duplicate_window_seconds: int = 30

    # Privacy and summaries
    sms_body_retention_hours: int = 2
    base_monthly_income: float = 45000.0

    # Review webhook
    review_webhook_url: Optional[str] = None
    http_timeout_seconds: float = 5.0
    webhook_max_retries: int = 5
    webhook_backoff_base: float = 1.0  # Exponential backoff base in seconds


settings = Settings()
