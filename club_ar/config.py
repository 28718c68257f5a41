"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from club_ar.domain.models import ClearingRule


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "club-ar-engine"
    log_level: str = "INFO"

    # Settlement
    # Which payment clears an "until payment" suspension override
    override_clearing_rule: ClearingRule = ClearingRule.MAX_BUCKET_CLEARED

    # Aging dashboard
    aging_page_size: int = 20


settings = Settings()
