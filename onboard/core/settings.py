# onboard/core/settings.py
import os
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from onboard.core.contracts import AirtableConfig, WebhookConfig

DEFAULT_PRIMARY_WEBHOOK = (
    "https://n8n.techifyserver.com/webhook/1ffccbab-f785-438e-b85e-b831271e6d58"
)
DEFAULT_SECONDARY_WEBHOOK = (
    "https://n8n.techifyserver.com/webhook/19c4b559-64ea-4b6a-ab11-eb98745d58f9"
)


class Settings(BaseSettings):
    # === Algemene app settings ===
    app_env: str = "local"  # local | development | production

    # === Airtable (record store) ===
    airtable_api_key: Optional[str] = None
    airtable_base_id: Optional[str] = None
    airtable_table_name: Optional[str] = None
    airtable_attachments_mode: str = Field(
        "attachment", description="attachment | text"
    )
    airtable_api_url: str = "https://api.airtable.com"
    airtable_content_url: str = "https://content.airtable.com"

    # === Webhooks (n8n) ===
    n8n_webhook_url: str = DEFAULT_PRIMARY_WEBHOOK
    n8n_form_webhook_url: str = DEFAULT_SECONDARY_WEBHOOK

    # === Web ===
    allowed_origins: list[str] = ["*"]

    # === Logging ===
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def airtable_config(self) -> AirtableConfig:
        return AirtableConfig(
            api_key=self.airtable_api_key or None,
            base_id=self.airtable_base_id or None,
            table_name=self.airtable_table_name or None,
            attachments_mode=(self.airtable_attachments_mode or "attachment").lower(),
            api_url=self.airtable_api_url.rstrip("/"),
            content_url=self.airtable_content_url.rstrip("/"),
        )

    def webhook_config(self) -> WebhookConfig:
        return WebhookConfig(
            primary_url=self.n8n_webhook_url or DEFAULT_PRIMARY_WEBHOOK,
            secondary_url=self.n8n_form_webhook_url or DEFAULT_SECONDARY_WEBHOOK,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton Settings instance met simpele env-overrides."""
    s = Settings()

    env = os.getenv("ENVIRONMENT", s.app_env).lower()
    if env == "production":
        s.log_level = "WARNING"
    elif env == "development":
        s.log_level = "DEBUG"

    return s


# Module-level export zodat `from onboard.core.settings import settings` werkt
settings = get_settings()
