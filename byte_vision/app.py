# byte_vision/app.py
# Description: Textual application shell for byte-vision.
#
# Imports
import logging
from typing import Optional
#
# Third-Party Imports
from loguru import logger
from textual import on, work
from textual.app import App, ComposeResult
from textual.widgets import Footer, Header, TabbedContent, TabPane
#
# Local Imports
from .config import (
    get_cli_log_file_path,
    get_cli_setting,
    get_config_path,
    get_saved_settings_path,
    get_work_items_path,
    load_cli_config_and_ensure_existence,
)
from .Event_Handlers.settings_events import initialize_settings
from .Local_Inference.inference_controller import CommandRunner, InferenceController
from .Local_Inference.model_lister import DirectoryModelLister, ModelLister
from .Settings.defaults_loader import DefaultSettingsLoader, TomlDefaultSettingsLoader
from .Settings.derived_fields import embedding_engine_bindings, primary_engine_bindings
from .Settings.model_resolver import EMBEDDING_MODEL_KEYS, PRIMARY_MODEL_KEYS, ModelResolver
from .Settings.saved_settings import SavedSettingsStore
from .Settings.validation import PRIMARY_REQUIRED_FLAGS
from .state.app_state import AppState
from .UI.Engine_Settings_Window import EngineSettingsWindow
from .UI.Work_Items_Window import WorkItemsWindow
from .Utils.logging_config import configure_logging
from .Work_Items.diff_engine import DiffEngine, DifflibDiffEngine
from .Work_Items.diff_workflow import DiffWorkflow
from .Work_Items.html_sanitizer import BleachHtmlSanitizer, HtmlSanitizer
from .Work_Items.work_item_store import JsonFileWorkItemStore, WorkItemStore
#
#######################################################################################################################
#
# Classes:


class ByteVisionApp(App[None]):
    """Settings editor and work item browser for local llama.cpp engines."""

    TITLE = "byte-vision"
    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
        ("ctrl+r", "reload_models", "Reload Models"),
    ]

    def __init__(
        self,
        state: Optional[AppState] = None,
        loader: Optional[DefaultSettingsLoader] = None,
        model_lister: Optional[ModelLister] = None,
        embed_model_lister: Optional[ModelLister] = None,
        work_item_store: Optional[WorkItemStore] = None,
        saved_store: Optional[SavedSettingsStore] = None,
        command_runner: Optional[CommandRunner] = None,
        diff_engine: Optional[DiffEngine] = None,
        sanitizer: Optional[HtmlSanitizer] = None,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.state = state or AppState()
        self.loader = loader or TomlDefaultSettingsLoader()
        app_paths = self.state.app_paths
        model_lister = model_lister or DirectoryModelLister(lambda: app_paths.get_value("ModelPath"))
        self.work_item_store = work_item_store or JsonFileWorkItemStore(get_work_items_path())
        self.saved_store = saved_store or SavedSettingsStore(get_saved_settings_path())

        self.primary_resolver = ModelResolver(self.state.llama_cli, app_paths, model_lister, PRIMARY_MODEL_KEYS)
        self.embed_resolver = ModelResolver(
            self.state.llama_embed, app_paths, embed_model_lister or model_lister, EMBEDDING_MODEL_KEYS
        )
        self.controller = (
            InferenceController(self.state.llama_cli, command_runner, store=self.work_item_store)
            if command_runner is not None else None
        )
        self.diff_workflow = DiffWorkflow(diff_engine or DifflibDiffEngine(), sanitizer or BleachHtmlSanitizer())

    def compose(self) -> ComposeResult:
        yield Header()
        with TabbedContent(id="main-tabs"):
            with TabPane("Llama CLI", id="tab-llama-cli"):
                yield EngineSettingsWindow(
                    self.state.llama_cli,
                    self.state.app_paths,
                    self.primary_resolver,
                    primary_engine_bindings(self.state.llama_cli, self.state.app_paths),
                    PRIMARY_REQUIRED_FLAGS,
                    "llama-cli Settings",
                    saved_store=self.saved_store,
                    controller=self.controller,
                    id="llama-cli-settings",
                )
            with TabPane("Llama Embed", id="tab-llama-embed"):
                yield EngineSettingsWindow(
                    self.state.llama_embed,
                    self.state.app_paths,
                    self.embed_resolver,
                    embedding_engine_bindings(self.state.llama_embed, self.state.app_paths),
                    {},
                    "llama-embedding Settings",
                    saved_store=self.saved_store,
                    id="llama-embed-settings",
                )
            with TabPane("Work Items", id="tab-work-items"):
                yield WorkItemsWindow(
                    self.state.work_items,
                    self.work_item_store,
                    self.diff_workflow,
                    id="work-items-window",
                )
        yield Footer()

    def on_mount(self) -> None:
        self.bootstrap_settings()

    def engine_windows(self):
        return list(self.query(EngineSettingsWindow))

    @work(thread=True, exclusive=True, group="settings-bootstrap")
    def bootstrap_settings(self) -> None:
        ok = initialize_settings(self.state, self.loader)
        self.call_from_thread(self._settings_bootstrapped, ok)

    def _settings_bootstrapped(self, ok: bool) -> None:
        if not ok:
            self.notify(self.state.settings_error, title="Settings", severity="error", timeout=8)
            for window in self.engine_windows():
                window.show_status(self.state.settings_error, "error")
            return
        for window in self.engine_windows():
            window.settings_ready()

    @on(TabbedContent.TabActivated, "#main-tabs")
    def handle_tab_activated(self, event: TabbedContent.TabActivated) -> None:
        # Model lists are rebuilt whenever an engine tab becomes visible
        if not self.state.is_ready:
            return
        for window in event.pane.query(EngineSettingsWindow):
            window.request_models()

    @on(EngineSettingsWindow.RunCompleted)
    def handle_run_completed(self, event: EngineSettingsWindow.RunCompleted) -> None:
        self.query_one(WorkItemsWindow).load_work_items()

    def action_reload_models(self) -> None:
        if not self.state.is_ready:
            return
        for window in self.engine_windows():
            window.request_models()

#
# Functions:


def main_cli_runner():
    """Entry point for the byte-vision command."""
    # Quiet stdlib loggers of libraries we pull in
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("markdown_it").setLevel(logging.WARNING)

    load_cli_config_and_ensure_existence()
    configure_logging(
        level=get_cli_setting("logging", "log_level", "INFO"),
        log_file=get_cli_log_file_path(),
        console=bool(get_cli_setting("logging", "console", False)),
        rotation=get_cli_setting("logging", "rotation", "10 MB"),
        retention=get_cli_setting("logging", "retention", "7 days"),
    )
    logger.info(f"Starting byte-vision with config {get_config_path()}")
    try:
        ByteVisionApp().run()
    except Exception:
        logger.exception("--- CRITICAL ERROR DURING app.run() ---")
        raise
    logger.info("byte-vision exited")


if __name__ == "__main__":
    main_cli_runner()

#
# End of app.py
#######################################################################################################################
