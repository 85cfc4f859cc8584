"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

Access-token lifetime is chosen from named presets rather than by
inspecting ENV inside the token code: ACCESS_TOKEN_PRESET selects the
preset explicitly, and when it is unset AppSettings derives it from ENV
(development → "development", anything else → "standard").
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Access-token lifetimes in seconds. The short development preset makes
# expiry-driven refresh flows reproducible by hand.
ACCESS_TOKEN_PRESETS: dict[str, int] = {
    "standard": 30 * 60,
    "development": 60,
}


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "identity"


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_issuer: str = "identity-service"
    jwt_audience: str = "identity-service.api"

    jwt_secret: str = ""
    # Falls back to jwt_secret when empty
    jwt_refresh_secret: str = ""

    access_token_preset: Optional[Literal["standard", "development"]] = None
    refresh_token_ttl_days: int = 30

    @property
    def refresh_secret(self) -> str:
        return self.jwt_refresh_secret or self.jwt_secret


class OTPSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    otp_length: int = 6
    otp_expiry_minutes: int = 10


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # None → "outbox" outside production, "zeptomail" in production
    email_provider: Optional[Literal["zeptomail", "outbox"]] = None

    zepto_api_token: str = ""
    zepto_from_email: str = "noreply@example.com"
    zepto_from_name: str = "Identity Service"

    outbox_capacity: int = 100


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_url: str = "http://localhost:8000"
    app_name: str = "identity-service"

    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    jwt: Optional[JWTSettings] = None
    otp: Optional[OTPSettings] = None
    email: Optional[EmailSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.otp is None:
            self.otp = OTPSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        if self.jwt.access_token_preset is None:
            self.jwt.access_token_preset = (
                "development" if self.env == "development" else "standard"
            )
        if self.email.email_provider is None:
            self.email.email_provider = (
                "zeptomail" if self.is_production else "outbox"
            )

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def access_token_ttl_seconds(self) -> int:
        return ACCESS_TOKEN_PRESETS[self.jwt.access_token_preset]
