# Work_Items_Window.py
# Description: History of inference runs with two-item selection and diffing
#
# Imports
from typing import List, Optional
#
# Third-Party Imports
from loguru import logger
from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Button, DataTable, RadioButton, RadioSet, Static
#
# Local Imports
from ..state.work_items_state import WorkItemsState
from ..Widgets.diff_result_dialog import DiffResultDialog
from ..Work_Items.diff_workflow import DiffWorkflow, InvalidSelectionError, clean_text
from ..Work_Items.work_item_selector import SELECTION_SIZE, WorkItem
from ..Work_Items.work_item_store import WorkItemStore, WorkItemStoreError, parse_work_items
#
########################################################################################################################
#
# Classes:

PREVIEW_LENGTH = 60
SELECTED_MARK = "x"


def _preview(text: str) -> str:
    text = clean_text(text)
    return text if len(text) <= PREVIEW_LENGTH else text[:PREVIEW_LENGTH - 3] + "..."


class WorkItemsWindow(Container):
    """Table of work items; pick two rows and a field, then diff them."""

    DEFAULT_CSS = """
    WorkItemsWindow {
        height: 100%;
        padding: 1;
    }

    WorkItemsWindow #work-items-table {
        height: 1fr;
    }

    WorkItemsWindow .diff-controls {
        height: auto;
        margin-top: 1;
    }

    WorkItemsWindow #work-items-status.error {
        color: $error;
    }
    """

    def __init__(self, state: WorkItemsState, store: WorkItemStore, workflow: DiffWorkflow, **kwargs):
        super().__init__(**kwargs)
        self.state = state
        self.store = store
        self.workflow = workflow
        self._diff_pending = False

    def compose(self) -> ComposeResult:
        yield Static("", id="work-items-status")
        yield DataTable(id="work-items-table", cursor_type="row", zebra_stripes=True)
        with Horizontal(classes="diff-controls"):
            with RadioSet(id="diff-field"):
                yield RadioButton("Diff Completion", id="diff-completion", value=True)
                yield RadioButton("Diff Prompt", id="diff-prompt")
                yield RadioButton("Diff Args", id="diff-args")
            yield Button(self.send_label(), id="send-selected", variant="primary", disabled=True)
            yield Button("Clear Selection", id="clear-selection")
            yield Button("Refresh", id="refresh-work-items")

    def on_mount(self) -> None:
        table = self.query_one("#work-items-table", DataTable)
        table.add_column("Sel", key="sel", width=3)
        table.add_column("Idx", key="idx")
        table.add_column("Prompt", key="prompt")
        table.add_column("Completion", key="completion")
        table.add_column("Args", key="args")
        table.add_column("Date", key="date")
        self.load_work_items()

    def send_label(self) -> str:
        return f"Send Selected Records ({len(self.state.selection)}/{SELECTION_SIZE})"

    def show_status(self, message: str, severity: str = "information") -> None:
        status = self.query_one("#work-items-status", Static)
        status.update(message)
        status.set_class(severity == "error", "error")

    # --- Loading ---

    @work(thread=True, group="work-items-loading")
    def load_work_items(self) -> None:
        self.state.is_loading = True
        try:
            items = parse_work_items(self.store.list())
        except WorkItemStoreError as e:
            logger.error(f"Failed to load work items: {e}")
            self.state.is_loading = False
            self.state.error = f"Failed to load work items: {e}"
            self.app.call_from_thread(self.show_status, self.state.error, "error")
            return
        self.app.call_from_thread(self._items_loaded, items)

    def _items_loaded(self, items: List[WorkItem]) -> None:
        self.state.set_items(items)
        self.state.is_loading = False
        self.state.error = None
        table = self.query_one("#work-items-table", DataTable)
        table.clear()
        for item in self.state.items:
            table.add_row(
                SELECTED_MARK if item.idx in self.state.selection else "",
                str(item.idx),
                _preview(item.prompt),
                _preview(item.completion),
                _preview(item.args),
                item.date,
                key=str(item.idx),
            )
        self.show_status(f"{len(items)} work item(s)")
        self._sync_selection()

    # --- Selection ---

    def _sync_selection(self) -> None:
        table = self.query_one("#work-items-table", DataTable)
        for item in self.state.items:
            mark = SELECTED_MARK if item.idx in self.state.selection else ""
            table.update_cell(str(item.idx), "sel", mark)
        button = self.query_one("#send-selected", Button)
        button.label = self.send_label()
        button.disabled = not self.state.selection.can_submit() or self.diff_in_progress

    def toggle_item(self, idx: int) -> None:
        self.state.selection.toggle(idx)
        self._sync_selection()

    @on(DataTable.RowSelected, "#work-items-table")
    def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        self.toggle_item(int(event.row_key.value))

    @on(Button.Pressed, "#clear-selection")
    def handle_clear(self) -> None:
        self.state.selection.clear()
        self._sync_selection()

    @on(Button.Pressed, "#refresh-work-items")
    def handle_refresh(self) -> None:
        self.load_work_items()

    @on(RadioSet.Changed, "#diff-field")
    def handle_field_changed(self, event: RadioSet.Changed) -> None:
        # RadioButton ids are "diff-<field>"
        self.state.diff_field = event.pressed.id.split("-", 1)[1]

    # --- Diff ---

    @property
    def diff_in_progress(self) -> bool:
        return self._diff_pending or self.workflow.in_flight

    @on(Button.Pressed, "#send-selected")
    def handle_send(self) -> None:
        if self.diff_in_progress:
            return
        self._diff_pending = True
        self._sync_selection()
        self.run_worker(self._request_diff(), group="diff")

    async def _request_diff(self) -> Optional[DiffResultDialog]:
        try:
            result = await self.workflow.request_diff(
                self.state.selection, self.state.items, self.state.diff_field
            )
        except InvalidSelectionError as e:
            self.app.notify(str(e), severity="warning")
            return None
        finally:
            self._diff_pending = False
            self._sync_selection()
        if result is None:
            if not self.workflow.in_flight:
                self.show_status("Diff failed, see the log for details", "error")
            return None
        dialog = DiffResultDialog(
            self.workflow.sanitize(result),
            result.left_text,
            result.right_text,
            title=f"Diff of {self.state.diff_field}",
        )
        await self.app.push_screen(dialog)
        return dialog

#
# End of Work_Items_Window.py
#######################################################################################################################
