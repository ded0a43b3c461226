"""Application-wide configuration loading and validation."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GREETING = (
    "Law Offices of Pritpal Singh, this is the virtual receptionist. "
    "How can I assist you with your California real-estate matter today?"
)


class Settings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    environment: Literal["local", "dev", "prod"] = Field(default="local")
    log_level: str = Field(default="INFO")
    port: int = Field(default=3000)

    # Reasoning engine (mandatory: the service cannot answer calls without it)
    openai_api_key: str = Field(description="API key for the realtime reasoning engine.")
    realtime_model: str = Field(default="gpt-realtime")
    realtime_voice: str = Field(default="alloy")
    transcription_model: str | None = Field(
        default="gpt-4o-mini-transcribe",
        description="Model used to transcribe caller audio; empty disables caller transcripts.",
    )

    # Firm identity / call intake
    law_firm_name: str = Field(default="Law Offices of Pritpal Singh")
    welcome_greeting: str = Field(default=DEFAULT_GREETING)
    say_voice: str = Field(default="Polly.Joanna-Neural")

    # Notification recipients
    law_firm_email: str | None = Field(default=None)
    escalation_email: str | None = Field(
        default=None,
        description="Dedicated escalation inbox; falls back to LAW_FIRM_EMAIL when unset.",
    )

    # SMTP (outbound notification channel)
    smtp_host: str | None = Field(default=None)
    smtp_port: int = Field(default=587)
    smtp_user: str | None = Field(default=None)
    smtp_password: str | None = Field(default=None)
    smtp_use_tls: bool = Field(default=True)
    smtp_timeout_seconds: float = Field(default=15.0, gt=0)

    # Twilio (outbound dialing for escalation)
    human_phone_number: str | None = Field(default=None, description="E.164, e.g. +1415...")
    twilio_account_sid: str | None = Field(default=None)
    twilio_auth_token: str | None = Field(default=None)
    twilio_from_number: str | None = Field(default=None, description="E.164, e.g. +1415...")
    escalation_twiml_url: str | None = Field(
        default=None,
        description="TwiML bin / handler URL executed when the human representative answers.",
    )

    # Calendly scheduling links
    calendly_free_phone_link: str | None = Field(default=None)
    calendly_free_zoom_link: str | None = Field(default=None)
    calendly_paid_zoom_link: str | None = Field(default=None)
    calendly_paid_in_person_link: str | None = Field(default=None)

    # Stripe payment links
    stripe_secret_key: str | None = Field(default=None)
    stripe_price_id_60_min: str | None = Field(default=None)
    stripe_api_base: str = Field(default="https://api.stripe.com/v1")

    http_timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator("openai_api_key")
    @classmethod
    def api_key_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("OPENAI_API_KEY may not be empty.")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
