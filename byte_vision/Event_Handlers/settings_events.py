# settings_events.py
# Description: Start-up population of the settings slices and restore of saved configurations.
#
# Imports
from typing import Any, Dict
#
# 3rd-Party Imports
from loguru import logger
#
# Local Imports
from ..Settings.defaults_loader import DefaultSettingsLoader
from ..Settings.saved_settings import SavedSettingsStore
from ..Settings.settings_store import SettingsError, SettingsSlice
from ..state.app_state import AppState
#
########################################################################################################################
#
# Functions:


def initialize_settings(state: AppState, loader: DefaultSettingsLoader) -> bool:
    """
    Populate every slice that is not initialized yet from the loader's defaults.

    Slices that are already initialized are left alone, so calling this again
    after a partial failure only fills in what is missing. A loader failure is
    surfaced on ``state.settings_error``; it never raises.

    Returns:
        True when all slices are initialized afterwards.
    """
    pending = [s for s in state.slices.values() if not s.is_initialized]
    if not pending:
        logger.debug("Settings already initialized, skipping bootstrap")
        return True

    state.settings_loading = True
    state.settings_error = None
    try:
        defaults = loader.load()
        raw_by_slice: Dict[str, Dict[str, Any]] = {
            state.llama_cli.name: defaults.primary_engine,
            state.llama_embed.name: defaults.embedding_engine,
            state.app_paths.name: defaults.app_paths,
        }
        for settings in pending:
            settings.init_from_defaults(raw_by_slice[settings.name])
    except Exception as e:
        state.settings_error = f"Failed to initialize settings: {e}"
        logger.error(state.settings_error)
        return False
    finally:
        state.settings_loading = False

    logger.info(f"Initialized settings slices: {[s.name for s in pending]}")
    return True


def restore_saved_settings(settings: SettingsSlice, store: SavedSettingsStore, description: str) -> bool:
    """Overwrite the fields of ``settings`` with a saved configuration. Returns False if none matched."""
    for saved in store.list(settings.name):
        if saved.description == description:
            try:
                settings.replace_raw(saved.settings)
            except SettingsError as e:
                logger.error(f"Saved settings '{description}' do not fit '{settings.name}': {e}")
                raise
            logger.info(f"Restored '{settings.name}' from saved settings '{description}'")
            return True
    logger.warning(f"No saved '{settings.name}' settings named '{description}'")
    return False

#
# End of settings_events.py
#######################################################################################################################
