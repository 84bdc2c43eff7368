# model_lister.py
# Description: Discovery of local GGUF model files for the llama.cpp engines.
#
# Imports
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Union
#
# Third-Party Imports
from loguru import logger
#
#######################################################################################################################
#
# Classes:

MODEL_FILE_EXTENSION = ".gguf"


@dataclass(frozen=True)
class ModelFile:
    """One model file as reported by a lister."""
    file_name: str
    full_path: str


class ModelLister(ABC):
    """Source of the models a user can pick from."""

    @abstractmethod
    def list(self) -> List[ModelFile]:
        """Return the available model files."""


class DirectoryModelLister(ModelLister):
    """Lists ``*.gguf`` files directly inside a model folder (no recursion)."""

    def __init__(self, model_folder: Union[str, Path, Callable[[], str]]):
        """
        Args:
            model_folder: The folder, or a callable returning it so the lister
                follows later edits of the model folder setting
        """
        self._model_folder = model_folder

    @property
    def model_folder(self) -> Path:
        folder = self._model_folder() if callable(self._model_folder) else self._model_folder
        return Path(folder).expanduser()

    def list(self) -> List[ModelFile]:
        folder = self.model_folder
        if not folder.is_dir():
            raise FileNotFoundError(f"Model folder does not exist: {folder}")

        models = [
            ModelFile(file_name=entry.name, full_path=str(entry))
            for entry in sorted(folder.iterdir())
            if entry.is_file() and entry.suffix.lower() == MODEL_FILE_EXTENSION
        ]
        logger.info(f"Found {len(models)} model file(s) in {folder}")
        return models

#
# End of model_lister.py
#######################################################################################################################
