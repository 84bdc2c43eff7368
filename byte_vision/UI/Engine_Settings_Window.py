# Engine_Settings_Window.py
# Description: Settings form for one llama.cpp engine, built from its settings slice
#
# Imports
from typing import Dict, List, Mapping, Optional
#
# Third-Party Imports
from loguru import logger
from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, VerticalScroll
from textual.message import Message
from textual.widgets import Button, Checkbox, Input, Label, Select, Static, TextArea
#
# Local Imports
from ..Event_Handlers.settings_events import restore_saved_settings
from ..Local_Inference.inference_controller import InferenceController
from ..Settings.derived_fields import DerivedFieldBinding
from ..Settings.model_resolver import ModelDescriptor, ModelResolver
from ..Settings.saved_settings import SavedSettingsError, SavedSettingsStore
from ..Settings.settings_store import SettingsError, SettingsSlice
from ..Settings.validation import ValidationResult, validate_description, validate_engine_settings
from ..Widgets.form_components import (
    create_button_group,
    create_setting_field,
    error_widget_id,
    field_widget_id,
    raw_key_from_widget_id,
)
from ..Work_Items.work_item_selector import WorkItem
#
########################################################################################################################
#
# Classes:


class EngineSettingsWindow(Container):
    """Form over one engine slice: model picker, every catalog field, save/restore and run controls."""

    DEFAULT_CSS = """
    EngineSettingsWindow {
        height: 100%;
        padding: 1;
    }

    EngineSettingsWindow .window-title {
        text-style: bold;
        margin-bottom: 1;
    }

    EngineSettingsWindow .settings-form {
        height: 1fr;
        border: round $primary;
        padding: 0 1;
    }

    EngineSettingsWindow .settings-status.error, EngineSettingsWindow .field-error {
        color: $error;
    }

    EngineSettingsWindow .form-flag-input {
        width: 20;
    }

    EngineSettingsWindow #engine-output {
        height: 10;
    }

    EngineSettingsWindow .saved-settings-row {
        height: auto;
    }
    """

    class RunCompleted(Message):
        """Posted after a run recorded a new work item."""

        def __init__(self, work_item: Optional[WorkItem]) -> None:
            super().__init__()
            self.work_item = work_item

    def __init__(
        self,
        settings: SettingsSlice,
        app_paths: SettingsSlice,
        resolver: ModelResolver,
        bindings: Dict[str, DerivedFieldBinding],
        required_flags: Mapping[str, str],
        title: str,
        saved_store: Optional[SavedSettingsStore] = None,
        controller: Optional[InferenceController] = None,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.settings = settings
        self.app_paths = app_paths
        self.resolver = resolver
        self.bindings = bindings
        self.required_flags = required_flags
        self.title_text = title
        self.saved_store = saved_store
        self.controller = controller
        self.validation = ValidationResult()
        self._model_initialized = False
        self._models_loading = False
        self._run_pending = False

    @property
    def run_in_progress(self) -> bool:
        return self._run_pending or (self.controller is not None and self.controller.is_processing)

    def compose(self) -> ComposeResult:
        yield Static(self.title_text, classes="window-title")
        yield Static("", id="settings-status", classes="settings-status")
        with VerticalScroll(classes="settings-form"):
            yield Label("Model:", classes="form-label")
            yield Select([], prompt="Select a model", id="model-select")
            for spec in self.settings.catalog:
                # The model path is edited through the model picker
                if spec.value_key == self.resolver.keys.full_path_key:
                    continue
                bindable = spec.cmd_key in self.required_flags
                yield from create_setting_field(
                    spec,
                    self.settings.get(spec.name),
                    required=bindable or spec.name == "Description",
                    editable_flag=bindable,
                )
        if self.saved_store is not None:
            with Horizontal(classes="saved-settings-row"):
                yield Select([], prompt="Saved settings", id="saved-select")
                yield Button("Restore", id="restore-settings")
                yield Button("Save", id="save-settings", variant="success")
                yield Button("Delete", id="delete-settings", variant="error")
        if self.controller is not None:
            yield from create_button_group([
                ("Run", "run-engine", "primary"),
                ("Cancel", "cancel-engine", "error"),
            ])
            yield TextArea("", id="engine-output", read_only=True)

    # --- State to widgets ---

    def settings_ready(self) -> None:
        """Called once the slices are initialized."""
        self.refresh_fields()
        self.update_validation()
        self.refresh_saved_options()
        self.request_models()

    def refresh_fields(self) -> None:
        """Push the slice's current values into the form."""
        for spec in self.settings.catalog:
            for raw_key in spec.raw_keys():
                for widget in self.query(f"#{field_widget_id(raw_key)}"):
                    value = self.settings.get_value(raw_key)
                    if widget.value != value:
                        widget.value = value
                    if raw_key in self.required_flags:
                        widget.disabled = bool(value)

    def update_validation(self) -> ValidationResult:
        self.validation = validate_engine_settings(self.settings, self.required_flags)
        for raw_key in ["Description", *self.required_flags]:
            for widget in self.query(f"#{error_widget_id(raw_key)}"):
                widget.update(self.validation.errors.get(raw_key, ""))
        for button in self.query("#run-engine"):
            button.disabled = not self.validation.is_valid or self.run_in_progress
        return self.validation

    def show_status(self, message: str, severity: str = "information") -> None:
        status = self.query_one("#settings-status", Static)
        status.update(message)
        status.set_class(severity == "error", "error")

    def refresh_saved_options(self) -> None:
        if self.saved_store is None:
            return
        try:
            saved = self.saved_store.list(self.settings.name)
        except SavedSettingsError as e:
            logger.error(str(e))
            self.show_status(str(e), "error")
            return
        self.query_one("#saved-select", Select).set_options([(s.description, s.description) for s in saved])

    # --- Models ---

    def request_models(self) -> None:
        """Rebuild the model list unless a load is already running."""
        if self._models_loading:
            return
        self._models_loading = True
        self.load_models()

    @work(thread=True, group="model-loading")
    def load_models(self) -> None:
        try:
            models = self.resolver.load_models()
        except Exception as e:
            self.app.call_from_thread(self._models_failed, f"Failed to load models: {e}")
            return
        self.app.call_from_thread(self._models_loaded, models)

    def _models_failed(self, message: str) -> None:
        self._models_loading = False
        self.show_status(message, "error")

    def _models_loaded(self, models: List[ModelDescriptor]) -> None:
        self._models_loading = False
        model_select = self.query_one("#model-select", Select)
        model_select.set_options([(m.file_name, m.id) for m in models])
        if not self._model_initialized:
            self.resolver.initialize()
            self._model_initialized = True
        if self.resolver.selected_model in {m.id for m in models}:
            model_select.value = self.resolver.selected_model
        self.refresh_fields()

    @on(Select.Changed, "#model-select")
    def handle_model_selected(self, event: Select.Changed) -> None:
        if not isinstance(event.value, str) or event.value == self.resolver.selected_model:
            return
        if self.resolver.on_model_selected(event.value) is not None:
            self.refresh_fields()

    # --- Field edits ---

    @on(Input.Changed)
    def handle_input_changed(self, event: Input.Changed) -> None:
        raw_key = raw_key_from_widget_id(event.input.id)
        if raw_key is None or raw_key in self.required_flags:
            return
        if event.value == self.settings.get_value(raw_key):
            return
        binding = self.bindings.get(raw_key)
        if binding is not None:
            stored = binding.on_edit(event.value)
            if stored != event.value:
                event.input.value = stored
        else:
            self.settings.set_value(raw_key, event.value)
        self.update_validation()

    @on(Input.Submitted)
    def handle_flag_submitted(self, event: Input.Submitted) -> None:
        raw_key = raw_key_from_widget_id(event.input.id)
        if raw_key not in self.required_flags:
            return
        try:
            self.settings.set_value(raw_key, event.value.strip())
        except SettingsError as e:
            self.app.notify(str(e), severity="error")
        self.refresh_fields()
        self.update_validation()

    @on(Checkbox.Changed)
    def handle_checkbox_changed(self, event: Checkbox.Changed) -> None:
        raw_key = raw_key_from_widget_id(event.checkbox.id)
        if raw_key is None or event.value == self.settings.get_value(raw_key):
            return
        self.settings.set_value(raw_key, event.value)

    # --- Save / restore ---

    @on(Button.Pressed, "#save-settings")
    def handle_save(self) -> None:
        description = self.settings.get_value("Description")
        problem = validate_description(description)
        if problem:
            self.update_validation()
            self.show_status(problem, "error")
            return
        try:
            self.saved_store.save(self.settings.name, description, self.settings.to_raw())
        except SavedSettingsError as e:
            logger.error(str(e))
            self.show_status(str(e), "error")
            return
        self.refresh_saved_options()
        self.show_status(f"Saved settings '{description.strip()}'")

    @on(Button.Pressed, "#restore-settings")
    def handle_restore(self) -> None:
        selected = self.query_one("#saved-select", Select).value
        if not isinstance(selected, str):
            self.app.notify("Choose saved settings to restore.", severity="warning")
            return
        try:
            restored = restore_saved_settings(self.settings, self.saved_store, selected)
        except (SettingsError, SavedSettingsError) as e:
            self.show_status(f"Could not restore '{selected}': {e}", "error")
            return
        if restored:
            self.refresh_fields()
            self.update_validation()
            self.show_status(f"Restored settings '{selected}'")

    @on(Button.Pressed, "#delete-settings")
    def handle_delete(self) -> None:
        selected = self.query_one("#saved-select", Select).value
        if not isinstance(selected, str):
            self.app.notify("Choose saved settings to delete.", severity="warning")
            return
        try:
            deleted = self.saved_store.delete(self.settings.name, selected)
        except SavedSettingsError as e:
            logger.error(str(e))
            self.show_status(str(e), "error")
            return
        self.refresh_saved_options()
        if deleted:
            self.show_status(f"Deleted saved settings '{selected}'")

    # --- Run control ---

    @on(Button.Pressed, "#run-engine")
    def handle_run(self) -> None:
        if self.run_in_progress:
            return
        if not self.update_validation().is_valid:
            self.app.notify("Fix the highlighted fields before running.", severity="warning")
            return
        # One run at a time; the controller rejects overlapping submits as well
        self._run_pending = True
        self.update_validation()
        self.run_worker(self._run_engine(), group="inference")

    async def _run_engine(self) -> None:
        self.show_status("Running...")
        try:
            completion = await self.controller.submit()
        finally:
            self._run_pending = False
            self.update_validation()
        if completion is not None:
            self.query_one("#engine-output", TextArea).load_text(completion)
            self.show_status("Run complete")
            self.post_message(self.RunCompleted(self.controller.last_work_item))
        elif self.controller.error:
            self.show_status(self.controller.error, "error")

    @on(Button.Pressed, "#cancel-engine")
    def handle_cancel(self) -> None:
        self.show_status(self.controller.cancel())
        self.update_validation()

#
# End of Engine_Settings_Window.py
#######################################################################################################################
