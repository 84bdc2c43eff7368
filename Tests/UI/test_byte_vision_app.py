"""
Pilot tests for the application shell and the engine settings windows.
"""

import pytest
from textual.widgets import Button, Input, Select

from byte_vision.app import ByteVisionApp
from byte_vision.Settings.saved_settings import SavedSettingsStore
from byte_vision.UI.Engine_Settings_Window import EngineSettingsWindow
from byte_vision.Work_Items.work_item_store import JsonFileWorkItemStore, parse_work_items

from conftest import FakeCommandRunner, FakeDefaultsLoader, FakeModelLister

pytestmark = [pytest.mark.asyncio, pytest.mark.integration]


async def settle(app, pilot, rounds=4):
    """Let chained thread workers and their call_from_thread callbacks finish."""
    for _ in range(rounds):
        await app.workers.wait_for_complete()
        await pilot.pause()


@pytest.fixture
def make_app(isolated_temp_dir, work_items_file):
    def factory(**overrides):
        kwargs = dict(
            loader=FakeDefaultsLoader(),
            model_lister=FakeModelLister(),
            work_item_store=JsonFileWorkItemStore(work_items_file),
            saved_store=SavedSettingsStore(isolated_temp_dir / "saved_settings.toml"),
        )
        kwargs.update(overrides)
        return ByteVisionApp(**kwargs)
    return factory


def cli_window(app) -> EngineSettingsWindow:
    return app.query_one("#llama-cli-settings", EngineSettingsWindow)


async def test_bootstrap_initializes_settings_and_selects_default_model(make_app):
    app = make_app()
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)

        assert app.state.is_ready
        window = cli_window(app)
        assert window.query_one("#model-select", Select).value == "/models/llama-7b.gguf"
        assert app.state.llama_cli.get_value("ModelFullPathVal") == "/models/llama-7b.gguf"
        # First load derives the log name from the application log folder
        assert app.state.llama_cli.get_value("ModelLogFileNameVal") == "/app/logs/llama-7b.gguf.log"
        assert window.query_one("#field-ModelLogFileNameVal", Input).value == "/app/logs/llama-7b.gguf.log"
        assert window.query_one("#field-TemperatureVal", Input).value == "0.8"


async def test_embedding_default_missing_from_list_leaves_no_selection(make_app):
    app = make_app()
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)

        assert app.embed_resolver.selected_model == ""
        assert app.state.llama_embed.get_value("EmbedModelLogFileNameVal") == ""


async def test_bootstrap_failure_is_shown(make_app):
    app = make_app(loader=FakeDefaultsLoader(error=OSError("config unreadable")))
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)

        assert not app.state.is_ready
        assert app.state.settings_error == "Failed to initialize settings: config unreadable"
        assert cli_window(app).query_one("#settings-status").has_class("error")


async def test_model_list_failure_is_reported(make_app):
    app = make_app(model_lister=FakeModelLister(error=FileNotFoundError("/models/")))
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)

        assert app.primary_resolver.models == []
        assert cli_window(app).query_one("#settings-status").has_class("error")


async def test_selecting_another_model_rederives_log_file(make_app):
    app = make_app()
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)
        window = cli_window(app)

        window.query_one("#model-select", Select).value = "/models/mistral-7b.gguf"
        await pilot.pause()

        assert app.state.llama_cli.get_value("ModelFullPathVal") == "/models/mistral-7b.gguf"
        assert app.state.llama_cli.get_value("ModelLogFileNameVal") == "/models/logs/mistral-7b.gguf.log"
        assert window.query_one("#field-ModelLogFileNameVal", Input).value == "/models/logs/mistral-7b.gguf.log"


async def test_editing_derived_field_keeps_folder_prefix(make_app):
    app = make_app()
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)
        cache_input = cli_window(app).query_one("#field-PromptCacheVal", Input)

        cache_input.value = "x"
        await pilot.pause()

        assert app.state.llama_cli.get_value("PromptCacheVal") == "/cache/x"
        assert cache_input.value == "/cache/x"


async def test_plain_edit_updates_slice(make_app):
    app = make_app()
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)

        cli_window(app).query_one("#field-TemperatureVal", Input).value = "0.3"
        await pilot.pause()

        assert app.state.llama_cli.get_value("TemperatureVal") == "0.3"
        assert app.state.llama_cli.get_value("TemperatureCmd") == "--temp"


async def test_bound_flag_input_is_locked(make_app):
    app = make_app()
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)
        flag_input = cli_window(app).query_one("#field-GPULayersCmd", Input)

        assert flag_input.value == "-ngl"
        assert flag_input.disabled


async def test_save_and_restore_settings(make_app, isolated_temp_dir):
    app = make_app()
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)
        window = cli_window(app)

        window.query_one("#field-Description", Input).value = "Fast run"
        await pilot.pause()
        window.query_one("#save-settings", Button).press()
        await pilot.pause()

        saved = SavedSettingsStore(isolated_temp_dir / "saved_settings.toml").list("llama_cli")
        assert [s.description for s in saved] == ["Fast run"]

        app.state.llama_cli.set_value("TemperatureVal", "1.5")
        window.query_one("#saved-select", Select).value = "Fast run"
        window.query_one("#restore-settings", Button).press()
        await pilot.pause()

        assert app.state.llama_cli.get_value("TemperatureVal") == "0.8"
        assert window.query_one("#field-TemperatureVal", Input).value == "0.8"


async def test_save_rejects_short_description(make_app, isolated_temp_dir):
    app = make_app()
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)
        window = cli_window(app)

        window.query_one("#field-Description", Input).value = "abc"
        await pilot.pause()
        window.query_one("#save-settings", Button).press()
        await pilot.pause()

        assert window.query_one("#settings-status").has_class("error")
        assert SavedSettingsStore(isolated_temp_dir / "saved_settings.toml").list("llama_cli") == []


async def test_run_records_work_item_and_refreshes_history(make_app, work_items_file):
    app = make_app(command_runner=FakeCommandRunner(output="Generated text"))
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)
        window = cli_window(app)

        assert not window.query_one("#run-engine", Button).disabled
        window.query_one("#run-engine", Button).press()
        await settle(app, pilot)

        items = parse_work_items(work_items_file.read_text(encoding="utf-8"))
        assert items[-1].completion == "Generated text"
        assert items[-1].idx == 4
        assert [i.idx for i in app.state.work_items.items] == [1, 2, 3, 4]


async def test_run_controls_absent_without_runner(make_app):
    app = make_app()
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)
        assert not cli_window(app).query("#run-engine")


async def wait_until(pilot, event, attempts=200):
    for _ in range(attempts):
        if event.is_set():
            return
        await pilot.pause(0.01)
    raise AssertionError("event was never set")


async def test_second_run_while_running_is_ignored(make_app):
    runner = FakeCommandRunner(output="done", block=True)
    app = make_app(command_runner=runner)
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)
        window = cli_window(app)
        run_button = window.query_one("#run-engine", Button)

        run_button.press()
        await wait_until(pilot, runner.started)
        assert run_button.disabled
        assert app.controller.is_processing

        run_button.press()
        window.handle_run()
        await pilot.pause()
        assert len(runner.snapshots) == 1
        assert runner.cancelled == 0

        runner.release.set()
        await settle(app, pilot)
        assert len(runner.snapshots) == 1
        assert not app.controller.is_processing
        assert not run_button.disabled


async def test_cancel_stops_running_engine(make_app, work_items_file):
    runner = FakeCommandRunner(output="late", block=True)
    app = make_app(command_runner=runner)
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)
        window = cli_window(app)

        window.query_one("#run-engine", Button).press()
        await wait_until(pilot, runner.started)
        window.query_one("#cancel-engine", Button).press()
        await settle(app, pilot)

        assert runner.cancelled == 1
        assert not app.controller.is_processing
        assert not window.query_one("#run-engine", Button).disabled
        assert len(parse_work_items(work_items_file.read_text(encoding="utf-8"))) == 3


async def test_delete_saved_settings(make_app, isolated_temp_dir):
    app = make_app()
    store = SavedSettingsStore(isolated_temp_dir / "saved_settings.toml")
    store.save("llama_cli", "Keep me", {"TemperatureVal": "0.5"})
    store.save("llama_cli", "Drop me", {"TemperatureVal": "0.9"})
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)
        window = cli_window(app)

        window.query_one("#saved-select", Select).value = "Drop me"
        window.query_one("#delete-settings", Button).press()
        await pilot.pause()

        assert [s.description for s in store.list("llama_cli")] == ["Keep me"]


async def test_model_reload_while_loading_is_skipped(make_app):
    lister = FakeModelLister()
    app = make_app(model_lister=lister)
    async with app.run_test(size=(120, 60)) as pilot:
        await settle(app, pilot)
        window = cli_window(app)
        before = lister.calls

        window.request_models()
        window.request_models()
        await settle(app, pilot)
        assert lister.calls == before + 1

        # A full reload completes without cancelling any worker
        app.action_reload_models()
        await settle(app, pilot)
        assert window.query_one("#model-select", Select).value == "/models/llama-7b.gguf"
