"""Devlog configuration loaded from environment variables.

For local development, settings can also be put in a .env file in the
project root.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from devlog.handler import HandlerOptions, TimeFormat
from devlog.record import parse_level


class DevlogConfig(BaseSettings):
    """Logging configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    """

    log_level: str = Field(
        default="INFO",
        description="Minimum log level (DEBUG, INFO, WARN/WARNING, ERROR)",
    )
    log_add_source: bool = Field(
        default=False,
        description="Add a 'source' attribute with the location that produced each log",
    )
    log_disable_colors: bool = Field(
        default=False,
        description="Never use colors, even on a color terminal",
    )
    log_force_colors: bool = Field(
        default=False,
        description="Always use colors, skipping the color terminal check",
    )
    log_time_format: TimeFormat = Field(
        default=TimeFormat.SHORT,
        description="Timestamp format: 'short' (time only) or 'full' (date and time)",
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format instead of devlog's format (for production)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("log_level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        parse_level(value)
        return value.upper()

    def to_options(self) -> HandlerOptions:
        """Build handler options from this configuration."""
        return HandlerOptions(
            level=parse_level(self.log_level),
            add_source=self.log_add_source,
            disable_colors=self.log_disable_colors,
            force_colors=self.log_force_colors,
            time_format=self.log_time_format,
        )


# Singleton pattern
_config: DevlogConfig | None = None


def get_config() -> DevlogConfig:
    """Get the devlog configuration singleton.

    Returns:
        DevlogConfig: Configuration instance
    """
    global _config
    if _config is None:
        _config = DevlogConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration, so the next get_config() re-reads the environment."""
    global _config
    _config = None
