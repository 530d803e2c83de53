"""Configuration for steamfriends.

steamfriends is primarily configured by a YAML file.  Secrets, such as the
Steam Web API key and the Redis password, may instead be injected via
environment variables so that they don't have to be written into the
configuration file.

Every part of the configuration that accepts environment variables uses the
same ``STEAMFRIENDS_`` prefix.  Only the settings with explicit
``validation_alias`` settings support configuration via environment variable.
"""

from __future__ import annotations

from pathlib import Path
from typing import Self

import yaml
from pydantic import AliasChoices, Field, HttpUrl, SecretStr, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from safir.logging import LogLevel, configure_logging
from safir.pydantic import EnvRedisDsn
from typing_extensions import override

from .constants import (
    INIT_DELAY_MAX,
    INIT_DELAY_MIN,
    REFRESH_INTERVAL_MAX,
    REFRESH_INTERVAL_MIN,
    UNSET_API_KEY,
)

__all__ = [
    "CamelCaseSettings",
    "Config",
    "EnvFirstSettings",
]


class CamelCaseSettings(BaseSettings):
    """Base class for Pydantic settings supporting camel-case.

    This base class also forbids all extra attributes.
    """

    model_config = SettingsConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )


class EnvFirstSettings(CamelCaseSettings):
    """Base class for Pydantic settings with environment overrides.

    Classes that inherit from this base class will prioritize environment
    variables over arguments to the class constructor.
    """

    @override
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Override the sources of settings.

        Deactivate :file:`.env` and secret file support.  Allow environment
        variables to override init parameters, since init parameters come
        from the YAML configuration file and we want environment variables to
        take precedent.
        """
        return (env_settings, init_settings)


class Config(EnvFirstSettings):
    """Configuration for steamfriends."""

    api_key: SecretStr = Field(
        SecretStr(UNSET_API_KEY),
        title="Steam Web API key",
        description=(
            "Key used to query the Steam Web API. If this is not set, or is"
            f" set to {UNSET_API_KEY}, the service is disabled."
        ),
        validation_alias=AliasChoices("STEAMFRIENDS_API_KEY", "apiKey"),
    )

    init_delay_seconds: int = Field(
        INIT_DELAY_MIN,
        title="Delay between lookups at startup",
        description=(
            "Delay in seconds between friend list lookups when warming the"
            " cache for all connected users, to avoid a burst of requests"
            " to the rate-limited Steam Web API. Values outside the range"
            f" {INIT_DELAY_MIN} to {INIT_DELAY_MAX} are clamped to that range."
        ),
    )

    refresh_interval_seconds: int = Field(
        3600,
        title="Friend list refresh interval",
        description=(
            "Minimum time in seconds before a user's friend list is refreshed"
            f" from Steam. Values outside the range {REFRESH_INTERVAL_MIN} to"
            f" {REFRESH_INTERVAL_MAX} are clamped to that range."
        ),
    )

    revalidate_cached: bool = Field(
        False,
        title="Re-check staleness of loaded records",
        description=(
            "If set, friend records already loaded into memory are checked"
            " against the refresh interval on every lookup and refreshed when"
            " stale. Otherwise, a record is only checked for staleness when"
            " it is first loaded from storage."
        ),
    )

    initial_users: list[str] = Field(
        [],
        title="Users to look up at startup",
        description=(
            "Steam IDs of users whose friend lists should be loaded when the"
            " service starts, paced by ``initDelaySeconds``"
        ),
    )

    steam_api_url: HttpUrl = Field(
        HttpUrl("https://api.steampowered.com"),
        title="Steam Web API URL",
        description="Base URL of the Steam Web API",
    )

    redis_url: EnvRedisDsn = Field(
        ...,
        title="Redis DSN",
        description="DSN of the Redis server used to store friend records",
        validation_alias=AliasChoices("STEAMFRIENDS_REDIS_URL", "redisUrl"),
    )

    redis_password: SecretStr | None = Field(
        None,
        title="Redis password",
        description="Password for the Redis server",
        validation_alias=AliasChoices(
            "STEAMFRIENDS_REDIS_PASSWORD", "redisPassword"
        ),
    )

    log_level: LogLevel = Field(
        LogLevel.INFO,
        title="Log level",
        description="Python logging level",
        validation_alias=AliasChoices(
            "STEAMFRIENDS_LOG_LEVEL", "logLevel"
        ),
    )

    slack_alerts: bool = Field(
        False,
        title="Enable Slack alerts",
        description=(
            "Whether to enable Slack alerts. If true, ``slackWebhook`` must"
            " also be set."
        ),
    )

    slack_webhook: SecretStr | None = Field(
        None,
        title="Slack webhook for alerts",
        description="If set, alerts will be posted to this Slack webhook",
        validation_alias=AliasChoices(
            "STEAMFRIENDS_SLACK_WEBHOOK", "slackWebhook"
        ),
    )

    @field_validator("init_delay_seconds")
    @classmethod
    def _clamp_init_delay(cls, v: int) -> int:
        return min(max(v, INIT_DELAY_MIN), INIT_DELAY_MAX)

    @field_validator("refresh_interval_seconds")
    @classmethod
    def _clamp_refresh_interval(cls, v: int) -> int:
        return min(max(v, REFRESH_INTERVAL_MIN), REFRESH_INTERVAL_MAX)

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Construct a Config object from a configuration file.

        Parameters
        ----------
        path
            Path to the configuration file in YAML.

        Returns
        -------
        Config
            The corresponding `Config` object.
        """
        with path.open("r") as f:
            return cls.model_validate(yaml.safe_load(f) or {})

    @property
    def steam_enabled(self) -> bool:
        """Whether a usable Steam Web API key has been configured.

        If this is false, no requests will be made to Steam and every friend
        lookup route will report that the service is not configured.
        """
        api_key = self.api_key.get_secret_value()
        return bool(api_key) and api_key != UNSET_API_KEY

    def configure_logging(self) -> None:
        """Configure logging based on the steamfriends configuration."""
        configure_logging(name="steamfriends", log_level=self.log_level)
