"""Configuration management service with Pydantic Settings.

This module provides centralized configuration management for the
DingTalk notifier, loading and validating environment variables at
startup.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dingtalk_notifier.alerter.models import TOKEN_PARAM, AlertDestinationConfig
from dingtalk_notifier.alerter.webhook import redact_webhook_url


class DingTalkSettings(BaseSettings):
    """DingTalk robot destination settings."""

    model_config = SettingsConfigDict(
        env_prefix="DINGTALK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    webhook_url: str | None = Field(
        default=None,
        alias="DINGTALK_WEBHOOK_URL",
        description="Webhook base URL override, ending before the token value",
    )
    token: SecretStr | None = Field(
        default=None,
        alias="DINGTALK_TOKEN",
        description="Robot access token",
    )
    secret_enabled: bool = Field(
        default=False,
        alias="DINGTALK_SECRET_ENABLED",
        description="Sign requests with the robot secret",
    )
    secret: SecretStr | None = Field(
        default=None,
        alias="DINGTALK_SECRET",
        description="Robot signing secret",
    )
    contacts: str | None = Field(
        default=None,
        alias="DINGTALK_CONTACTS",
        description="Comma-separated mobile numbers to mention",
    )
    at_all: bool = Field(
        default=False,
        alias="DINGTALK_AT_ALL",
        description="Mention everybody in the group",
    )

    @field_validator("webhook_url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate webhook URL format."""
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("Webhook URL must be an HTTP(S) endpoint")
        if not v.endswith(TOKEN_PARAM):
            raise ValueError(f"Webhook URL must end with {TOKEN_PARAM!r}")
        return v

    @model_validator(mode="after")
    def validate_secret(self) -> DingTalkSettings:
        """Require a secret when signing is enabled."""
        if self.secret_enabled and not (
            self.secret and self.secret.get_secret_value()
        ):
            raise ValueError("DINGTALK_SECRET is required when DINGTALK_SECRET_ENABLED is set")
        return self

    @property
    def enabled(self) -> bool:
        """Check if a DingTalk robot is configured."""
        return self.token is not None

    def to_destination(self) -> AlertDestinationConfig:
        """Build the destination config for the dispatcher.

        Raises:
            ValueError: If no token is configured.
        """
        if self.token is None:
            raise ValueError("DINGTALK_TOKEN is not set")
        return AlertDestinationConfig(
            token=self.token.get_secret_value(),
            webhook_url=self.webhook_url,
            secret_enabled=self.secret_enabled,
            secret=self.secret.get_secret_value() if self.secret else None,
            contacts=self.contacts,
            is_at_all=self.at_all,
        )


class Settings(BaseSettings):
    """Main application settings.

    Loads configuration from environment variables with support for
    .env files via python-dotenv.

    Example:
        ```python
        from dingtalk_notifier.config import get_settings

        settings = get_settings()
        print(settings.dingtalk.enabled)
        print(settings.log_level)
        ```
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    dingtalk: DingTalkSettings = Field(default_factory=DingTalkSettings)

    # Application settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )
    http_timeout: float = Field(
        default=10.0,
        alias="HTTP_TIMEOUT",
        description="Robot request timeout in seconds",
        ge=1.0,
        le=60.0,
    )
    template_dir: str | None = Field(
        default=None,
        alias="TEMPLATE_DIR",
        description="Directory overriding the bundled message templates",
    )
    dry_run: bool = Field(
        default=False,
        alias="DRY_RUN",
        description="Render alerts without sending them",
    )

    def get_logging_level(self) -> int:
        """Get the numeric logging level."""
        level: int = getattr(logging, self.log_level)
        return level

    def redacted_summary(self) -> dict[str, str]:
        """Get a summary of settings with secrets redacted.

        Returns:
            Dictionary of settings with sensitive values masked.
        """
        return {
            "dingtalk_enabled": str(self.dingtalk.enabled),
            "webhook_url": (
                redact_webhook_url(self.dingtalk.webhook_url)
                if self.dingtalk.webhook_url
                else "(default)"
            ),
            "token": "(set)" if self.dingtalk.token else "(not set)",
            "secret_enabled": str(self.dingtalk.secret_enabled),
            "contacts": self.dingtalk.contacts or "(none)",
            "at_all": str(self.dingtalk.at_all),
            "log_level": self.log_level,
            "http_timeout": str(self.http_timeout),
            "template_dir": self.template_dir or "(bundled)",
            "dry_run": str(self.dry_run),
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Uses LRU cache to ensure settings are loaded only once and
    reused across the application.

    Returns:
        The Settings instance.

    Raises:
        ValidationError: If environment variables have invalid values.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing when you need to reload settings with
    different environment variables.
    """
    get_settings.cache_clear()
