"""Slackmark configuration management."""

import logging

from pydantic_settings import BaseSettings
from pydantic import Field

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SlackmarkSettings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    # Conversion
    convert_markdown: bool = Field(default=True, description="Convert Markdown/HTML to mrkdwn before posting")
    reveal_invisible: bool = Field(default=False, description="Show zero-width spaces as <ZWSP> in CLI output")

    # Logging
    log_level: str = Field(default="WARNING", description="Log level for the slackmark logger")

    model_config = {"env_prefix": "SLACKMARK_", "env_file": ".env", "extra": "ignore"}


def load_settings() -> SlackmarkSettings:
    """Load settings from environment."""
    settings = SlackmarkSettings()

    logger = logging.getLogger("slackmark.config")
    level = settings.log_level.upper()
    if level not in _LOG_LEVELS:
        logger.warning(f"Unknown log level '{settings.log_level}', using WARNING")
        level = "WARNING"
    settings.log_level = level

    return settings
