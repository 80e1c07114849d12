"""Configuration management for the hackathon idea bot."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, SecretStr, model_validator


class SlackConfig(BaseModel):
    """Slack workspace connection settings."""

    bot_token: SecretStr = Field(..., description="Bot User OAuth token (xoxb-...)")
    signing_secret: SecretStr = Field(..., description="Signing secret for request verification")
    channel_id: Optional[str] = Field(
        default=None, description="Idea channel; restricts listening and receives daily posts"
    )
    admin_user_id: str = Field(default="U07M4BA86LF", description="The single admin user")


class BotConfig(BaseModel):
    """Bot behavior settings."""

    trigger_word: str = Field(default="ide", min_length=1)
    dad_joke_chance: float = Field(default=0.25, ge=0.0, le=1.0)
    reply_delay_min: float = Field(default=1.0, ge=0.0, description="Seconds before the thread reply")
    reply_delay_max: float = Field(default=4.0, ge=0.0)
    dad_joke_delay: float = Field(default=2.0, ge=0.0)

    max_retries: int = Field(default=3, ge=1)
    retry_base_delay: float = Field(default=1.0, ge=0.0)

    # Database settings
    database_url: str = Field(
        default="sqlite+aiosqlite:///~/.ideabot/ideas.db",
        description="SQLAlchemy async URL (sqlite+aiosqlite or postgresql+asyncpg)",
    )
    db_timeout: float = Field(default=10.0, gt=0, description="Connection timeout in seconds")

    # Rate limiting
    rate_limit_window: float = Field(default=60.0, gt=0, description="Window length in seconds")
    rate_limit_max: int = Field(default=10, ge=1)
    rate_limit_sweep_interval: float = Field(default=60.0, gt=0)

    @model_validator(mode="after")
    def check_reply_delays(self) -> "BotConfig":
        if self.reply_delay_max < self.reply_delay_min:
            raise ValueError("reply_delay_max must be >= reply_delay_min")
        return self


class ScheduleConfig(BaseModel):
    """Daily reminder schedule."""

    daily_hour: int = Field(default=9, ge=0, le=23)
    daily_minute: int = Field(default=0, ge=0, le=59)
    timezone: str = "Europe/Copenhagen"


class Config(BaseModel):
    """Root configuration model."""

    slack: SlackConfig
    bot: BotConfig = BotConfig()
    schedule: ScheduleConfig = ScheduleConfig()


def load_config(config_path: str | Path = "config.yaml") -> Config:
    """Load and validate configuration from YAML file.

    Supports ${VAR_NAME} syntax for environment variable expansion.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValidationError: If config is invalid.
        ValueError: If referenced environment variable is not set.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Copy config.example.yaml to config.yaml and fill in your values."
        )

    with path.open() as f:
        raw_config = yaml.safe_load(f) or {}

    # Expand environment variables in the format ${VAR_NAME}
    def expand_env_vars(obj):
        if isinstance(obj, dict):
            return {k: expand_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [expand_env_vars(item) for item in obj]
        elif isinstance(obj, str) and obj.startswith("${") and obj.endswith("}"):
            env_var = obj[2:-1]
            value = os.getenv(env_var)
            if value is None:
                raise ValueError(f"Environment variable '{env_var}' is not set")
            return value
        return obj

    raw_config = expand_env_vars(raw_config)

    return Config(**raw_config)
