"""
DriveDesk Relay — Application Configuration
=============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading. The relay cannot do anything
       useful without its Gemini key, so a missing key stops the process at startup.
How:   Pydantic Settings reads from environment variables (or .env file).
       create_app() builds one Settings object and stores it on app.state;
       handlers receive it through FastAPI dependencies.
Who:   Used by the application factory, the services and the entry point.
When:  Constructed once at startup.

Environment variables:
    GEMINI_KEY              Google Generative AI key (required)
    PHONE_NUMBER_ID         WhatsApp Business phone number id
    ACCESS_TOKEN_WHATSAPP   WhatsApp Cloud API bearer token
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Only GEMINI_KEY is mandatory. The WhatsApp credentials are read at startup
    but not enforced: without them the booking endpoint returns the provider's
    authorization error through the normal 500 path.
    """

    # ── Google Gemini ─────────────────────────────────────────────────────
    # How to obtain: https://aistudio.google.com/app/apikey
    gemini_key: str = Field(
        default="",
        description="Google Gemini API key for licence field extraction",
    )
    gemini_model: str = Field(default="gemini-2.0-flash-lite")

    # ── WhatsApp Cloud API ────────────────────────────────────────────────
    phone_number_id: str = Field(
        default="",
        description="WhatsApp Business phone number id used in the messages URL",
    )
    access_token_whatsapp: str = Field(
        default="",
        description="Bearer token for the WhatsApp Cloud API",
    )
    whatsapp_api_url: str = Field(default="https://graph.facebook.com/v17.0")

    # ── Uploads ───────────────────────────────────────────────────────────
    # Relative to the working directory
    upload_dir: str = Field(default="./uploads")

    # ── CORS ──────────────────────────────────────────────────────────────
    # "*" allows any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=5000, ge=1, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def gemini_configured(self) -> bool:
        return bool(self.gemini_key)

    @property
    def whatsapp_configured(self) -> bool:
        return bool(self.phone_number_id and self.access_token_whatsapp)

    def validate_required(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan) and by the CLI entry point.
        Raises ValueError listing every missing setting.
        """
        errors = []
        if not self.gemini_key:
            errors.append(
                "GEMINI_KEY is not set. "
                "Get a key at https://aistudio.google.com/app/apikey"
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide Settings, read from the environment on first use."""
    return Settings()
