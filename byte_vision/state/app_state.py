"""
Root application state container.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..Settings.field_catalog import APP_PATH_FIELDS, EMBEDDING_ENGINE_FIELDS, PRIMARY_ENGINE_FIELDS
from ..Settings.settings_store import SettingsSlice
from .work_items_state import WorkItemsState


def _slice_factory(name, catalog):
    return lambda: SettingsSlice(name, catalog)


@dataclass
class AppState:
    """
    Root state container for the entire application.
    The three settings slices live here and are handed to the views that edit them.
    """

    # Settings slices
    llama_cli: SettingsSlice = field(default_factory=_slice_factory("llama_cli", PRIMARY_ENGINE_FIELDS))
    llama_embed: SettingsSlice = field(default_factory=_slice_factory("llama_embed", EMBEDDING_ENGINE_FIELDS))
    app_paths: SettingsSlice = field(default_factory=_slice_factory("app_paths", APP_PATH_FIELDS))

    # Sub-states
    work_items: WorkItemsState = field(default_factory=WorkItemsState)

    # Settings bootstrap status
    settings_loading: bool = False
    settings_error: Optional[str] = None

    # App-level state
    version: str = "0.1.0"
    config_path: Optional[str] = None

    @property
    def slices(self) -> Dict[str, SettingsSlice]:
        return {s.name: s for s in (self.llama_cli, self.llama_embed, self.app_paths)}

    @property
    def is_ready(self) -> bool:
        return all(s.is_initialized for s in self.slices.values())

    def reset(self) -> None:
        """Reset all state to defaults."""
        self.llama_cli = SettingsSlice("llama_cli", PRIMARY_ENGINE_FIELDS)
        self.llama_embed = SettingsSlice("llama_embed", EMBEDDING_ENGINE_FIELDS)
        self.app_paths = SettingsSlice("app_paths", APP_PATH_FIELDS)
        self.work_items = WorkItemsState()
        self.settings_loading = False
        self.settings_error = None

    def to_dict(self) -> dict:
        """Raw settings of every slice, for saving or debugging."""
        return {
            "version": self.version,
            **{name: s.to_raw() for name, s in self.slices.items()},
        }
