"""Configuration management using Pydantic Settings"""

from datetime import timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./cashflow.db"

    # External Services
    change_webhook_url: Optional[str] = None  # receives FINANCE_DATA_CHANGED events

    # Service
    service_name: str = "cashflow-gateway"
    log_level: str = "INFO"

    # Projection
    default_horizon_days: int = 30
    allowed_horizons: List[int] = [7, 14, 30, 60, 90]
    timezone: str = "America/Sao_Paulo"
    balance_stale_after_days: int = 1
    health_stale_after_days: int = 30
    projection_roll_forward: bool = True
    create_tables: bool = True  # create missing tables on startup

    # HTTP Client
    http_timeout_seconds: float = 5.0
    webhook_max_retries: int = 5
    webhook_backoff_base: float = 1.0  # Exponential backoff base in seconds

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def balance_stale_after(self) -> timedelta:
        return timedelta(days=self.balance_stale_after_days)

    @property
    def health_stale_after(self) -> timedelta:
        return timedelta(days=self.health_stale_after_days)


settings = Settings()
