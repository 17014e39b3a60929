from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_WHATSAPP_API_URL = "https://graph.facebook.com/v18.0"


class Settings(BaseSettings):
    """Application settings, read from the environment and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    port: int = 3000

    # WhatsApp Cloud API
    whatsapp_api_url: str = DEFAULT_WHATSAPP_API_URL
    whatsapp_access_token: Optional[str] = None
    phone_number_id: Optional[str] = None
    business_account_id: Optional[str] = None  # not used by the handler
    webhook_verify_token: Optional[str] = None

    # OpenAI
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4"

    # Google Sheets
    google_sheets_id: Optional[str] = None
    google_credentials: Optional[str] = None  # raw service-account JSON
    google_sheets_range: str = "Leads!A:G"

    http_timeout_seconds: float = Field(default=20.0, gt=0)

    # Logging; an empty LOG_FILE disables the file sink
    log_file: str = "logs/app.log"
    log_level: str = "INFO"

    @field_validator("whatsapp_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return (v or DEFAULT_WHATSAPP_API_URL).rstrip("/")
