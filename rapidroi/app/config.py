"""
Runtime configuration for the RapidROI gateway.

All integration endpoints (spreadsheet webhook, Slack, email webhook) are read
once from the environment into a Settings object. Services receive the Settings
instance at construction; nothing reads the environment at call time.

An unset value means "not configured" and is never an error: the affected
integration reports a failed delivery with a reason instead of raising.
"""

import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field


DEFAULT_TRIGGERED_FROM = "rapidroi-gateway"
DEFAULT_WEBHOOK_TIMEOUT_SECONDS = 10.0


class Settings(BaseModel):
    """Integration and security configuration."""

    spreadsheet_webhook_url: Optional[str] = Field(
        default=None, description="Spreadsheet webhook (Apps Script, Zapier, ...)"
    )
    spreadsheet_webhook_token: Optional[str] = Field(
        default=None, description="Shared token appended to spreadsheet payloads"
    )
    slack_webhook_url: Optional[str] = Field(
        default=None, description="Slack incoming webhook URL"
    )
    slack_bot_token: Optional[str] = Field(
        default=None, description="Slack bot token (xoxb-...) for chat.postMessage"
    )
    slack_channel: Optional[str] = Field(
        default=None, description="Slack channel used with the bot token"
    )
    email_webhook_url: Optional[str] = Field(
        default=None, description="Webhook that sends emails with attachments"
    )
    email_webhook_token: Optional[str] = Field(
        default=None, description="Shared token for the email webhook"
    )
    webhook_timeout_seconds: float = Field(
        default=DEFAULT_WEBHOOK_TIMEOUT_SECONDS, gt=0
    )
    triggered_from: str = Field(
        default=DEFAULT_TRIGGERED_FROM,
        description="Origin reported in lead payloads",
    )
    jwt_secret_key: str = Field(default="dev-secret-key-change-in-production")
    jwt_algorithm: str = Field(default="HS256")

    @property
    def spreadsheet_configured(self) -> bool:
        return bool(self.spreadsheet_webhook_url)

    @property
    def slack_bot_configured(self) -> bool:
        return bool(self.slack_bot_token and self.slack_channel)

    @property
    def slack_configured(self) -> bool:
        return self.slack_bot_configured or bool(self.slack_webhook_url)

    @property
    def email_configured(self) -> bool:
        return bool(self.email_webhook_url)


def _env(name: str) -> Optional[str]:
    """Read an environment variable, treating blank values as unset."""
    value = os.getenv(name, "").strip()
    return value or None


def load_settings() -> Settings:
    """Build Settings from environment variables."""
    timeout = _env("WEBHOOK_TIMEOUT_SECONDS")
    return Settings(
        spreadsheet_webhook_url=_env("SPREADSHEET_WEBHOOK_URL"),
        spreadsheet_webhook_token=_env("SPREADSHEET_WEBHOOK_TOKEN"),
        slack_webhook_url=_env("SLACK_WEBHOOK_URL"),
        slack_bot_token=_env("SLACK_BOT_TOKEN"),
        slack_channel=_env("SLACK_CHANNEL"),
        email_webhook_url=_env("EMAIL_WEBHOOK_URL"),
        email_webhook_token=_env("EMAIL_WEBHOOK_TOKEN"),
        webhook_timeout_seconds=(
            float(timeout) if timeout else DEFAULT_WEBHOOK_TIMEOUT_SECONDS
        ),
        triggered_from=_env("TRIGGERED_FROM") or DEFAULT_TRIGGERED_FROM,
        jwt_secret_key=_env("JWT_SECRET_KEY") or "dev-secret-key-change-in-production",
        jwt_algorithm=_env("JWT_ALGORITHM") or "HS256",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    FastAPI dependency returning the process-wide Settings.

    Tests override this with app.dependency_overrides[get_settings].
    """
    return load_settings()


def rate_limits_disabled() -> bool:
    """ENV=TEST or DISABLE_RATE_LIMITS=1 turns slowapi limits off."""
    return (
        os.environ.get("ENV") == "TEST"
        or os.environ.get("DISABLE_RATE_LIMITS") == "1"
    )
