"""
Application configuration using Pydantic settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # App
    app_name: str = "txnflow"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./data/txnflow.sqlite"

    # Server
    frontend_url: str = "http://localhost:5173"

    # Parsing
    primary_language: str = "en"
    allow_manual_fallback: bool = True
    alternate_script_penalty: float = 0.1
    fallback_penalty: float = 0.3

    # Review thresholds
    low_confidence_threshold: float = 0.5
    review_confidence_threshold: float = 0.7

    # Recurring detection
    min_occurrences: int = 3
    subscription_confidence_threshold: float = 0.7
    lookback_days: int = 365
    max_amount_variance: float = 0.2
    max_interval_variance: float = 0.3
    min_pattern_confidence: float = 0.5

    # Processing log
    processing_log_limit: int = 100
    top_counterparties: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TXNFLOW_",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
