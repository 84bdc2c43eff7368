# saved_settings.py
# Description: Named engine configurations saved by the user and restored into a slice later.
#
# Imports
import sys
if sys.version_info < (3, 11):
    import tomli as tomllib
else:
    import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Union
#
# Third-Party Imports
import toml
from loguru import logger
#
#######################################################################################################################
#
# Classes:


class SavedSettingsError(Exception):
    """Raised when the saved-settings file cannot be read or written."""


@dataclass(frozen=True)
class SavedSettings:
    description: str
    settings: Dict[str, Any]


class SavedSettingsStore:
    """
    TOML file of saved configurations, one table per slice, keyed by description:

        [llama_cli."Fast 7B"]
        GPULayersCmd = "-ngl"
        ...
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "rb") as f:
                return tomllib.load(f)
        except (tomllib.TOMLDecodeError, OSError) as e:
            raise SavedSettingsError(f"Could not read saved settings from {self.path}: {e}") from e

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                toml.dump(data, f)
        except OSError as e:
            raise SavedSettingsError(f"Could not write saved settings to {self.path}: {e}") from e

    def save(self, slice_name: str, description: str, raw: Dict[str, Any]) -> None:
        """Store ``raw`` under ``description``, replacing an entry of the same name."""
        if not description or not description.strip():
            raise SavedSettingsError("A description is required to save settings")
        data = self._read()
        data.setdefault(slice_name, {})[description.strip()] = dict(raw)
        self._write(data)
        logger.info(f"Saved '{slice_name}' settings as '{description.strip()}'")

    def list(self, slice_name: str) -> List[SavedSettings]:
        entries = self._read().get(slice_name, {})
        return [
            SavedSettings(description=description, settings=dict(values))
            for description, values in sorted(entries.items())
            if isinstance(values, dict)
        ]

    def delete(self, slice_name: str, description: str) -> bool:
        data = self._read()
        entries = data.get(slice_name, {})
        if description not in entries:
            return False
        del entries[description]
        self._write(data)
        logger.info(f"Deleted saved '{slice_name}' settings '{description}'")
        return True

#
# End of saved_settings.py
#######################################################################################################################
