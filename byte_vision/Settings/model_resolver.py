"""
Model selection: resolves a model id against the lister's output and keeps the
model path and model log file fields of an engine slice in step with it.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union

from loguru import logger

from ..Local_Inference.model_lister import ModelFile, ModelLister
from .derived_fields import compute_derived
from .settings_store import SettingsSlice

LOG_FILE_EXTENSION = ".log"


def normalize_model_id(path: str) -> str:
    """Listers may report either separator style; ids always use forward slashes."""
    return path.replace("\\", "/")


@dataclass(frozen=True)
class ModelDescriptor:
    id: str
    file_name: str
    full_path: str


@dataclass(frozen=True)
class ModelResolution:
    full_path: str
    log_file_name: str


@dataclass(frozen=True)
class ModelFieldKeys:
    """Where an engine keeps its model settings, and which folders its log name derives from."""
    full_path_key: str
    log_file_key: str
    app_full_path_key: str
    app_file_name_key: str
    model_folder_key: str = "ModelPath"
    selection_log_folder_key: str = "ModelLogPath"
    initial_log_folder_key: str = "AppLogPath"


PRIMARY_MODEL_KEYS = ModelFieldKeys(
    full_path_key="ModelFullPathVal",
    log_file_key="ModelLogFileNameVal",
    app_full_path_key="ModelFullPathVal",
    app_file_name_key="ModelFileName",
)

EMBEDDING_MODEL_KEYS = ModelFieldKeys(
    full_path_key="EmbedModelFullPathVal",
    log_file_key="EmbedModelLogFileNameVal",
    app_full_path_key="EmbedModelFullPathVal",
    app_file_name_key="EmbedModelFileName",
)


def build_model_descriptors(listing: Iterable[Union[ModelFile, Mapping[str, Any]]]) -> List[ModelDescriptor]:
    descriptors = []
    for item in listing:
        if isinstance(item, ModelFile):
            file_name, full_path = item.file_name, item.full_path
        else:
            file_name = item.get("fileName") or item.get("FileName") or ""
            full_path = item.get("fullPath") or item.get("FullPath") or ""
        normalized = normalize_model_id(full_path)
        descriptors.append(ModelDescriptor(id=normalized, file_name=file_name, full_path=normalized))
    return descriptors


def resolve_selection(
    selected_id: str,
    models: Iterable[ModelDescriptor],
    log_folder: str,
) -> Optional[ModelResolution]:
    """
    Resolve a selected model id.

    Returns None when the id is not in ``models``; this happens legitimately
    before the model list has loaded and callers treat it as a no-op.
    """
    wanted = normalize_model_id(selected_id or "")
    for model in models:
        if model.id == wanted:
            return ModelResolution(
                full_path=model.full_path,
                log_file_name=compute_derived(log_folder, model.file_name + LOG_FILE_EXTENSION),
            )
    return None


def initialize_from_persisted(
    persisted_full_path: Optional[str],
    models: Iterable[ModelDescriptor],
    log_folder: str,
    persisted_folder: str = "",
    persisted_file_name: str = "",
) -> Optional[ModelResolution]:
    """Resolve the model remembered from a previous session."""
    if persisted_full_path:
        selected_id = persisted_full_path
    elif persisted_folder and persisted_file_name:
        selected_id = f"{persisted_folder}{persisted_file_name}"
    else:
        return None
    return resolve_selection(selected_id, models, log_folder)


class ModelResolver:
    """Model selection handling for one engine slice."""

    def __init__(
        self,
        settings: SettingsSlice,
        app_paths: SettingsSlice,
        lister: ModelLister,
        keys: ModelFieldKeys,
    ):
        self.settings = settings
        self.app_paths = app_paths
        self.lister = lister
        self.keys = keys
        self.models: List[ModelDescriptor] = []
        self.selected_model: str = ""

    def load_models(self) -> List[ModelDescriptor]:
        try:
            self.models = build_model_descriptors(self.lister.list())
        except Exception as e:
            logger.error(f"Failed to load models: {e}")
            raise
        return self.models

    def on_model_selected(self, selected_id: str) -> Optional[ModelResolution]:
        log_folder = self.app_paths.get_value(self.keys.selection_log_folder_key)
        resolution = resolve_selection(selected_id, self.models, log_folder)
        if resolution is None:
            logger.debug(f"Model '{selected_id}' not in list for '{self.settings.name}', ignoring selection")
            return None
        self._apply(resolution)
        return resolution

    def initialize(self) -> Optional[ModelResolution]:
        """
        First-load resolution. Precedence: the engine's own persisted model path,
        then the default model path from the app paths, then model folder + file name.
        Nothing is written unless the model is found in the list.
        """
        persisted = (
            self.settings.get_value(self.keys.full_path_key)
            or self.app_paths.get_value(self.keys.app_full_path_key)
        )

        resolution = initialize_from_persisted(
            persisted,
            self.models,
            self.app_paths.get_value(self.keys.initial_log_folder_key),
            persisted_folder=self.app_paths.get_value(self.keys.model_folder_key),
            persisted_file_name=self.app_paths.get_value(self.keys.app_file_name_key),
        )
        if resolution is not None:
            self._apply(resolution)
        return resolution

    def _apply(self, resolution: ModelResolution) -> None:
        self.settings.set_value(self.keys.log_file_key, resolution.log_file_name)
        self.settings.set_value(self.keys.full_path_key, resolution.full_path)
        self.selected_model = resolution.full_path
        logger.info(f"'{self.settings.name}' model set to {resolution.full_path}")
