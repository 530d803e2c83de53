"""Config dependency for FastAPI."""

from __future__ import annotations

import os
from pathlib import Path

from ..config import Config
from ..constants import CONFIG_PATH

__all__ = ["ConfigDependency", "config_dependency"]


class ConfigDependency:
    """Provides the configuration as a dependency.

    The configuration is loaded from :envvar:`STEAMFRIENDS_CONFIG_PATH`, or
    from the default path if that is not set, the first time it is needed.
    The test suite and the command-line interface may point the dependency at
    a different file, which reloads the configuration and reconfigures
    logging.
    """

    def __init__(self) -> None:
        path = os.getenv("STEAMFRIENDS_CONFIG_PATH", CONFIG_PATH)
        self._config_path = Path(path)
        self._config: Config | None = None

    async def __call__(self) -> Config:
        """Load the configuration if necessary and return it."""
        return self.config()

    @property
    def config_path(self) -> Path:
        """Path to the configuration file."""
        return self._config_path

    def config(self) -> Config:
        """Load the configuration if necessary and return it.

        This is equivalent to using the dependency as a callable except that
        it's not async and can therefore be used from non-async functions.
        """
        if not self._config:
            self._load()
        assert self._config
        return self._config

    def set_config_path(self, path: Path) -> None:
        """Change the configuration path and reload the config.

        Parameters
        ----------
        path
            The new configuration path.
        """
        self._config_path = path
        self._load()

    def _load(self) -> None:
        self._config = Config.from_file(self._config_path)
        self._config.configure_logging()


config_dependency = ConfigDependency()
"""The dependency that will return the current configuration."""
