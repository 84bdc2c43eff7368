# derived_fields.py
# Description: Keeps path fields such as log file names consistent with the base folder they live in.
#
# Imports
from dataclasses import dataclass
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from .settings_store import SettingsSlice
#
#######################################################################################################################
#
# Functions:


def compute_derived(base_folder: str, suffix: str) -> str:
    """Value of a derived field recomputed programmatically (e.g. on model selection)."""
    return base_folder + suffix


def reconcile_on_edit(base_folder: str, edited_value: str) -> str:
    """
    Prefix-preserving policy applied to every direct user edit of a derived field.

    Only the text past ``len(base_folder)`` is user-controlled. A value no longer
    than the base folder is treated as a bare suffix, so the base folder is put
    back in front of it, even if the user was trying to delete part of the prefix.

    Args:
        base_folder: Current base folder from the application paths slice
        edited_value: The field content after the edit

    Returns:
        The value to store in the field
    """
    if not edited_value:
        return edited_value
    if len(edited_value) <= len(base_folder):
        return base_folder + edited_value
    return base_folder + edited_value[len(base_folder):]


@dataclass
class DerivedFieldBinding:
    """Ties one derived field of an engine slice to its base folder in the app paths slice."""
    settings: SettingsSlice
    field_name: str
    app_paths: SettingsSlice
    base_folder_key: str

    @property
    def base_folder(self) -> str:
        return self.app_paths.get_value(self.base_folder_key)

    def on_edit(self, edited_value: str) -> str:
        """Reconcile a user edit, store it, and return what was stored."""
        new_value = reconcile_on_edit(self.base_folder, edited_value)
        self.settings.set_value(self.field_name, new_value)
        logger.debug(f"{self.settings.name}.{self.field_name} <- '{new_value}'")
        return new_value

    def recompute(self, suffix: str) -> str:
        new_value = compute_derived(self.base_folder, suffix)
        self.settings.set_value(self.field_name, new_value)
        return new_value


def primary_engine_bindings(llama_cli: SettingsSlice, app_paths: SettingsSlice) -> dict:
    """Derived fields of the llama-cli slice, keyed by the raw key the form edits."""
    return {
        "ModelLogFileNameVal": DerivedFieldBinding(llama_cli, "ModelLogFileNameVal", app_paths, "ModelLogPath"),
        "PromptCacheVal": DerivedFieldBinding(llama_cli, "PromptCacheVal", app_paths, "PromptCachePath"),
    }


def embedding_engine_bindings(llama_embed: SettingsSlice, app_paths: SettingsSlice) -> dict:
    return {
        "EmbedModelLogFileNameVal": DerivedFieldBinding(
            llama_embed, "EmbedModelLogFileNameVal", app_paths, "ModelLogPath"
        ),
    }

#
# End of derived_fields.py
#######################################################################################################################
