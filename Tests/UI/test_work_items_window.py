"""
Pilot tests for the work items table, the two-row selection and the diff dialog flow.
"""

import json

import pytest
from textual.app import App
from textual.widgets import Button, DataTable, RadioButton

from byte_vision.state.work_items_state import WorkItemsState
from byte_vision.UI.Work_Items_Window import WorkItemsWindow
from byte_vision.Widgets.diff_result_dialog import DiffResultDialog
from byte_vision.Work_Items.diff_workflow import DiffWorkflow
from byte_vision.Work_Items.html_sanitizer import BleachHtmlSanitizer
from byte_vision.Work_Items.work_item_store import JsonFileWorkItemStore

from conftest import BlockingDiffEngine, FakeDiffEngine

pytestmark = [pytest.mark.asyncio, pytest.mark.integration]


class WorkItemsTestApp(App):
    """Hosts a bare work items window."""

    def __init__(self, store, engine):
        super().__init__()
        self.state = WorkItemsState()
        self.engine = engine
        self.workflow = DiffWorkflow(engine, BleachHtmlSanitizer())
        self.store = store

    def compose(self):
        yield WorkItemsWindow(self.state, self.store, self.workflow, id="work-items-window")


async def settle(app, pilot, rounds=3):
    for _ in range(rounds):
        await app.workers.wait_for_complete()
        await pilot.pause()


@pytest.fixture
def engine():
    return FakeDiffEngine()


@pytest.fixture
def app(work_items_file, engine):
    return WorkItemsTestApp(JsonFileWorkItemStore(work_items_file), engine)


def send_button(app) -> Button:
    return app.query_one("#send-selected", Button)


async def test_rows_are_loaded(app):
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)

        table = app.query_one("#work-items-table", DataTable)
        assert table.row_count == 3
        assert [i.idx for i in app.state.items] == [1, 2, 3]
        assert str(send_button(app).label) == "Send Selected Records (0/2)"
        assert send_button(app).disabled


async def test_send_enabled_only_with_two_selected(app):
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        window = app.query_one(WorkItemsWindow)

        window.toggle_item(1)
        assert str(send_button(app).label) == "Send Selected Records (1/2)"
        assert send_button(app).disabled

        window.toggle_item(2)
        assert str(send_button(app).label) == "Send Selected Records (2/2)"
        assert not send_button(app).disabled

        # A third pick slides the window
        window.toggle_item(3)
        assert app.state.selection.indices == (2, 3)

        window.toggle_item(3)
        assert app.state.selection.indices == (2,)
        assert send_button(app).disabled


async def test_row_selection_toggles_item(app):
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        table = app.query_one("#work-items-table", DataTable)

        table.focus()
        table.move_cursor(row=1)
        await pilot.press("enter")
        await pilot.pause()

        assert app.state.selection.indices == (2,)


async def test_clear_selection(app):
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        window = app.query_one(WorkItemsWindow)
        window.toggle_item(1)
        window.toggle_item(2)

        app.query_one("#clear-selection", Button).press()
        await pilot.pause()

        assert len(app.state.selection) == 0
        assert send_button(app).disabled


async def test_send_pushes_diff_dialog(app, engine):
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        window = app.query_one(WorkItemsWindow)
        window.toggle_item(1)
        window.toggle_item(3)

        send_button(app).press()
        await settle(app, pilot)

        assert isinstance(app.screen, DiffResultDialog)
        assert engine.calls == [('"4"', '"Blue\\r\\nand green"')]
        assert app.screen.left_text == "4"
        assert app.screen.right_text == "Blue and green"

        await pilot.press("escape")
        await pilot.pause()
        assert not isinstance(app.screen, DiffResultDialog)


async def test_diff_field_follows_radio_choice(app, engine):
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        window = app.query_one(WorkItemsWindow)

        app.query_one("#diff-prompt", RadioButton).value = True
        await pilot.pause()
        assert app.state.diff_field == "prompt"

        window.toggle_item(1)
        window.toggle_item(2)
        send_button(app).press()
        await settle(app, pilot)

        assert engine.calls == [('"What is 2+2?"', '"What is 3+3?"')]


async def test_engine_failure_reports_and_stays_on_window(app, engine):
    engine.error = RuntimeError("diff service down")
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        window = app.query_one(WorkItemsWindow)
        window.toggle_item(1)
        window.toggle_item(2)

        send_button(app).press()
        await settle(app, pilot)

        assert not isinstance(app.screen, DiffResultDialog)
        assert app.query_one("#work-items-status").has_class("error")
        assert app.workflow.result is None


async def test_refresh_drops_selection_of_removed_items(app, work_items_file):
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        window = app.query_one(WorkItemsWindow)
        window.toggle_item(1)
        window.toggle_item(3)

        work_items_file.write_text('[{"idx": 1, "prompt": "p", "completion": "c"}]', encoding="utf-8")
        app.query_one("#refresh-work-items", Button).press()
        await settle(app, pilot)

        assert app.state.selection.indices == (1,)
        assert app.query_one("#work-items-table", DataTable).row_count == 1


async def test_corrupt_history_is_reported(isolated_temp_dir, engine):
    path = isolated_temp_dir / "broken.json"
    path.write_text("{oops", encoding="utf-8")
    app = WorkItemsTestApp(JsonFileWorkItemStore(path), engine)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)

        assert app.state.items == []
        assert app.state.error.startswith("Failed to load work items")
        assert app.query_one("#work-items-status").has_class("error")


async def test_send_is_locked_while_diff_runs(work_items_file):
    engine = BlockingDiffEngine()
    app = WorkItemsTestApp(JsonFileWorkItemStore(work_items_file), engine)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        window = app.query_one(WorkItemsWindow)
        window.toggle_item(1)
        window.toggle_item(2)

        send_button(app).press()
        for _ in range(200):
            if engine.started.is_set():
                break
            await pilot.pause(0.01)
        assert engine.started.is_set()
        assert send_button(app).disabled

        window.handle_send()
        await pilot.pause()
        assert window.diff_in_progress

        engine.release.set()
        await settle(app, pilot)
        assert isinstance(app.screen, DiffResultDialog)
        await pilot.press("escape")
        await pilot.pause()
        assert not send_button(app).disabled


async def test_history_with_missing_and_repeated_idx_loads(isolated_temp_dir, engine):
    path = isolated_temp_dir / "work_items.json"
    path.write_text(json.dumps([
        {"idx": 1, "prompt": "first", "completion": "a"},
        {"prompt": "no index", "completion": "b"},
        {"idx": 1, "prompt": "repeat", "completion": "c"},
    ]), encoding="utf-8")
    app = WorkItemsTestApp(JsonFileWorkItemStore(path), engine)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)

        assert app.query_one("#work-items-table", DataTable).row_count == 2
        assert [(i.idx, i.prompt) for i in app.state.items] == [(1, "first"), (2, "no index")]
        assert app.state.error is None
