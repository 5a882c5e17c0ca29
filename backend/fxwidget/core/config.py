"""
Application configuration using Pydantic BaseSettings.
Loads environment variables and provides typed configuration.
"""

from pydantic_settings import BaseSettings
from typing import Dict, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project metadata
    PROJECT_NAME: str = "FX Widget"
    VERSION: str = "0.1.0"
    API_V1_PREFIX: str = "/api/v1"

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Exchange rate source (rates are relative to BASE_CURRENCY)
    RATES_API_URL: str = "https://open.er-api.com/v6/latest/USD"
    BASE_CURRENCY: str = "USD"
    RATES_REQUEST_TIMEOUT: int = 30
    RATES_MAX_RETRIES: int = 1
    RATES_REFRESH_INTERVAL_SECONDS: float = 300.0
    SCHEDULER_ENABLED: bool = True

    # Currencies offered by the selectors
    SUPPORTED_CURRENCIES: List[str] = ["USD", "KRW", "JPY", "EUR", "CNY"]
    # Header rate labels: currency code -> decimal places
    DISPLAYED_RATES: Dict[str, int] = {"KRW": 2, "JPY": 2, "EUR": 4}
    ZERO_DECIMAL_CURRENCIES: List[str] = ["KRW", "JPY"]

    # Initial selection
    DEFAULT_FROM_CURRENCY: str = "USD"
    DEFAULT_TO_CURRENCY: str = "KRW"
    DEFAULT_AMOUNT: str = "1"

    # UI timing
    INPUT_DEBOUNCE_SECONDS: float = 0.1
    SWAP_ANIMATION_SECONDS: float = 0.3

    # Display texts
    DISPLAY_TIMEZONE: str = "Asia/Seoul"
    PLACEHOLDER_TEXT: str = "--"
    RATE_ERROR_TEXT: str = "오류"
    UPDATE_FAILED_TEXT: str = "업데이트 실패"
    UPDATE_TIME_SUFFIX: str = "업데이트"

    # Static site served with shared header/footer components
    SITE_DIR: str = "site"

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_REFRESH: str = "10/minute"

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
