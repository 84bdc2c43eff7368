# inference_controller.py
# Description: Submits an engine's settings to a command runner and records the completion as a work item.
#
# Imports
import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from ..Settings.settings_store import SettingsSlice
from ..Settings.validation import PRIMARY_REQUIRED_FLAGS, ValidationResult, validate_engine_settings
from ..Work_Items.work_item_selector import WorkItem
from ..Work_Items.work_item_store import WorkItemStore, WorkItemStoreError
#
#######################################################################################################################
#
# Classes:

PROMPT_FIELD = "PromptText"


class CommandRunner(ABC):
    """Runs an engine with a frozen copy of its settings."""

    @abstractmethod
    def run(self, settings_snapshot: Mapping[str, Any]) -> str:
        """Run to completion and return the engine output. Called off the event loop."""

    @abstractmethod
    def cancel(self) -> None:
        """Ask a running process to stop. May be called from the event loop at any time."""


class InferenceController:
    """
    One run at a time for one engine slice.

    ``cancel`` is optimistic: the processing flag is cleared immediately and
    whatever the cancelled run returns later is discarded.
    """

    def __init__(
        self,
        settings: SettingsSlice,
        runner: CommandRunner,
        store: Optional[WorkItemStore] = None,
        required_flags: Mapping[str, str] = PRIMARY_REQUIRED_FLAGS,
    ):
        self.settings = settings
        self.runner = runner
        self.store = store
        self.required_flags = required_flags
        self.is_processing = False
        self.last_completion: Optional[str] = None
        self.last_work_item: Optional[WorkItem] = None
        self.validation = ValidationResult()
        self.error: Optional[str] = None
        self._generation = 0

    async def submit(self) -> Optional[str]:
        """
        Validate, snapshot and run the engine.

        Returns:
            The completion, or None when validation failed, a run is already in
            progress, the runner failed, or the run was cancelled.
        """
        self.validation = validate_engine_settings(self.settings, self.required_flags)
        if not self.validation.is_valid:
            logger.info(f"Run of '{self.settings.name}' blocked by validation: {self.validation.errors}")
            return None
        if self.is_processing:
            logger.warning(f"A '{self.settings.name}' run is already in progress")
            return None

        snapshot = self.settings.snapshot()
        args = json.dumps(self.settings.to_raw())
        prompt = self.settings.get_value(PROMPT_FIELD) if PROMPT_FIELD in self.settings else ""

        self._generation += 1
        generation = self._generation
        self.is_processing = True
        self.error = None
        try:
            completion = await asyncio.to_thread(self.runner.run, snapshot)
        except asyncio.CancelledError:
            # The runner thread cannot be interrupted; stop the process through the runner
            if generation == self._generation:
                self.cancel()
            raise
        except Exception as e:
            if generation == self._generation:
                self.error = f"Inference failed: {e}"
                logger.error(f"'{self.settings.name}' run failed: {e}")
            return None
        finally:
            if generation == self._generation:
                self.is_processing = False

        if generation != self._generation:
            logger.info(f"Discarding result of cancelled '{self.settings.name}' run")
            return None

        self.last_completion = completion
        if self.store is not None:
            try:
                self.last_work_item = await asyncio.to_thread(self.store.append, prompt, completion, args)
            except WorkItemStoreError as e:
                logger.error(f"Could not record work item: {e}")
        return completion

    def cancel(self) -> str:
        if not self.is_processing:
            return "No active process to cancel"
        logger.info("Canceling current process...")
        self._generation += 1
        self.is_processing = False
        try:
            self.runner.cancel()
        except Exception as e:
            logger.error(f"Runner failed to cancel: {e}")
        return "Process canceled successfully"

#
# End of inference_controller.py
#######################################################################################################################
