"""Runtime configuration for the talent engine API and external text service."""

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    gemini_api_key: Optional[str] = Field(default=None, validation_alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
    # Overrides the Generative Language endpoint (proxies, test servers)
    gemini_base_url: Optional[str] = Field(default=None, validation_alias="GEMINI_BASE_URL")
    gemini_timeout_seconds: float = Field(default=30.0, validation_alias="GEMINI_TIMEOUT_SECONDS")

    target_confidence: int = Field(default=60, ge=0, le=100, validation_alias="TARGET_CONFIDENCE")
    byok_default_budget_usd: float = Field(default=25.0, validation_alias="BYOK_DEFAULT_BUDGET_USD")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic root handler for the API process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
