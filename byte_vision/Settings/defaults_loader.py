# defaults_loader.py
# Description: Supplies the raw default settings each slice is initialized from.
#
# Imports
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from ..config import load_cli_config_and_ensure_existence
#
#######################################################################################################################
#
# Classes:

PRIMARY_ENGINE_TABLE = "llama_cli"
EMBEDDING_ENGINE_TABLE = "llama_embed"
APP_PATHS_TABLE = "app_paths"


@dataclass
class DefaultSettings:
    """Flat raw mappings for the three slices, as read from configuration."""
    primary_engine: Dict[str, Any] = field(default_factory=dict)
    embedding_engine: Dict[str, Any] = field(default_factory=dict)
    app_paths: Dict[str, Any] = field(default_factory=dict)


class DefaultSettingsLoader(ABC):

    @abstractmethod
    def load(self) -> DefaultSettings:
        """Return the raw defaults. May raise; callers surface the failure."""


def _expand_home(value: Any) -> Any:
    # os.path keeps the trailing slash that folder settings rely on
    if isinstance(value, str) and value.startswith("~"):
        return os.path.expanduser(value)
    return value


class TomlDefaultSettingsLoader(DefaultSettingsLoader):
    """Reads the ``[llama_cli]``, ``[llama_embed]`` and ``[app_paths]`` tables of the app config."""

    def __init__(self, config_provider: Optional[Callable[[], Dict[str, Any]]] = None):
        self._config_provider = config_provider or load_cli_config_and_ensure_existence

    def load(self) -> DefaultSettings:
        config = self._config_provider()
        missing = [t for t in (PRIMARY_ENGINE_TABLE, EMBEDDING_ENGINE_TABLE, APP_PATHS_TABLE)
                   if not isinstance(config.get(t), dict)]
        if missing:
            raise ValueError(f"Configuration is missing table(s): {', '.join(missing)}")

        defaults = DefaultSettings(
            primary_engine=dict(config[PRIMARY_ENGINE_TABLE]),
            embedding_engine=dict(config[EMBEDDING_ENGINE_TABLE]),
            app_paths={k: _expand_home(v) for k, v in config[APP_PATHS_TABLE].items()},
        )
        logger.debug(
            f"Loaded default settings: {len(defaults.primary_engine)} llama-cli, "
            f"{len(defaults.embedding_engine)} llama-embed, {len(defaults.app_paths)} app path keys"
        )
        return defaults

#
# End of defaults_loader.py
#######################################################################################################################
