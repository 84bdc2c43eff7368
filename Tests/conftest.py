"""
Root conftest.py for shared test fixtures and configuration.
This file provides common fixtures used across the test suite.
"""

import json
import shutil
import sys
import tempfile
import threading
from pathlib import Path
from typing import Any, List, Mapping, Optional

import pytest

# Add project root to Python path for consistent imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from byte_vision import config as bv_config
from byte_vision.Local_Inference.inference_controller import CommandRunner
from byte_vision.Local_Inference.model_lister import ModelFile, ModelLister
from byte_vision.Settings.defaults_loader import DefaultSettings, DefaultSettingsLoader
from byte_vision.Settings.field_catalog import APP_PATH_FIELDS, EMBEDDING_ENGINE_FIELDS, PRIMARY_ENGINE_FIELDS
from byte_vision.Settings.settings_store import SettingsSlice
from byte_vision.Work_Items.diff_engine import DiffEngine


# ========== Path and File System Fixtures ==========

@pytest.fixture
def isolated_temp_dir():
    """Create an isolated temporary directory that's always cleaned up."""
    temp_dir = tempfile.mkdtemp(prefix="byte_vision_test_")
    temp_path = Path(temp_dir)
    yield temp_path
    if temp_path.exists():
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(autouse=True)
def isolated_config(isolated_temp_dir, monkeypatch):
    """Point the config module at a throwaway file and drop its cache around every test."""
    config_path = isolated_temp_dir / "config" / "config.toml"
    monkeypatch.setenv(bv_config.CONFIG_PATH_ENV_VAR, str(config_path))
    monkeypatch.setattr(bv_config, "_CONFIG_CACHE", None)
    yield config_path
    bv_config._CONFIG_CACHE = None


# ========== Settings Fixtures ==========

APP_PATHS_RAW = {
    "LLamaCliPath": "/opt/llama/llama-cli",
    "LLamaEmbedCliPath": "/opt/llama/llama-embedding",
    "AppLogPath": "/app/logs/",
    "AppLogFileName": "byte_vision.log",
    "ModelPath": "/models/",
    "ModelFileName": "llama-7b.gguf",
    "ModelFullPathVal": "",
    "EmbedModelFileName": "nomic-embed.gguf",
    "EmbedModelFullPathVal": "",
    "ModelLogPath": "/models/logs/",
    "PromptCachePath": "/cache/",
    "PromptTemplatePath": "/templates/",
    "DocumentPath": "/docs/",
    "ReportDataPath": "/reports/",
}

LLAMA_CLI_RAW = {
    "Description": "Default llama-cli settings",
    "ModelCmd": "-m",
    "PromptCmd": "-p",
    "PromptText": "Hello there",
    "GPULayersCmd": "-ngl",
    "GPULayersVal": "99",
    "TemperatureCmd": "--temp",
    "TemperatureVal": "0.8",
    "MemLockCmd": "--mlock",
    "MemLockCmdEnabled": False,
    "ModelLogFileCmd": "--log-file",
    "PromptCacheCmd": "--prompt-cache",
}

LLAMA_EMBED_RAW = {
    "Description": "Default llama-embedding settings",
    "EmbedModelPathCmd": "-m",
    "EmbedPoolingCmd": "--pooling",
    "EmbedPoolingVal": "mean",
    "EmbedModelLogFileCmd": "--log-file",
}


@pytest.fixture
def llama_cli():
    """An all-empty primary engine slice."""
    return SettingsSlice("llama_cli", PRIMARY_ENGINE_FIELDS)


@pytest.fixture
def llama_embed():
    return SettingsSlice("llama_embed", EMBEDDING_ENGINE_FIELDS)


@pytest.fixture
def app_paths():
    """Application paths slice populated with test folders."""
    paths = SettingsSlice("app_paths", APP_PATH_FIELDS)
    paths.init_from_defaults(APP_PATHS_RAW)
    return paths


@pytest.fixture
def initialized_llama_cli(llama_cli):
    llama_cli.init_from_defaults(LLAMA_CLI_RAW)
    return llama_cli


class FakeDefaultsLoader(DefaultSettingsLoader):
    """Loader returning fixed raw defaults, or raising ``error`` if set."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls = 0

    def load(self) -> DefaultSettings:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return DefaultSettings(
            primary_engine=dict(LLAMA_CLI_RAW),
            embedding_engine=dict(LLAMA_EMBED_RAW),
            app_paths=dict(APP_PATHS_RAW),
        )


@pytest.fixture
def defaults_loader():
    return FakeDefaultsLoader()


# ========== Collaborator Fakes ==========

class FakeModelLister(ModelLister):
    def __init__(self, models: Optional[List[ModelFile]] = None, error: Optional[Exception] = None):
        self.models = models if models is not None else [
            ModelFile("llama-7b.gguf", "/models/llama-7b.gguf"),
            ModelFile("mistral-7b.gguf", "\\models\\mistral-7b.gguf"),
        ]
        self.error = error
        self.calls = 0

    def list(self) -> List[ModelFile]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.models)


@pytest.fixture
def model_lister():
    return FakeModelLister()


class FakeDiffEngine(DiffEngine):
    """Records calls; returns ``markup`` or raises ``error``."""

    def __init__(self, markup: str = "<span>same</span><ins class=\"diff-insert\">new</ins>", error=None):
        self.markup = markup
        self.error = error
        self.calls = []

    def diff(self, left: str, right: str) -> str:
        self.calls.append((left, right))
        if self.error is not None:
            raise self.error
        return self.markup


class BlockingDiffEngine(DiffEngine):
    """Blocks in ``diff`` until ``release`` is set."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()

    def diff(self, left: str, right: str) -> str:
        self.started.set()
        self.release.wait(timeout=5)
        return "<span>done</span>"


class FakeCommandRunner(CommandRunner):
    """Returns ``output`` (or raises ``error``); can be made to wait for ``release``."""

    def __init__(self, output: str = "completion text", error: Optional[Exception] = None, block: bool = False):
        self.output = output
        self.error = error
        self.block = block
        self.started = threading.Event()
        self.release = threading.Event()
        self.snapshots: List[Mapping[str, Any]] = []
        self.cancelled = 0

    def run(self, settings_snapshot: Mapping[str, Any]) -> str:
        self.snapshots.append(settings_snapshot)
        self.started.set()
        if self.block:
            self.release.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.output

    def cancel(self) -> None:
        self.cancelled += 1
        self.release.set()


# ========== Work Item Fixtures ==========

SAMPLE_WORK_ITEMS = [
    {"idx": 1, "prompt": "What is 2+2?", "completion": "4", "args": "{\"TemperatureVal\": \"0.8\"}", "date": "2025-01-01 10:00:00"},
    {"idx": 2, "prompt": "What is 3+3?", "completion": "6", "args": "{\"TemperatureVal\": \"0.2\"}", "date": "2025-01-02 10:00:00"},
    {"idx": 3, "prompt": "Name a color", "completion": "Blue\r\nand green", "args": "{}", "date": "2025-01-03 10:00:00"},
]


@pytest.fixture
def work_items_file(isolated_temp_dir):
    path = isolated_temp_dir / "work_items.json"
    path.write_text(json.dumps(SAMPLE_WORK_ITEMS), encoding="utf-8")
    return path


# ========== Markers ==========

def pytest_configure(config):
    """Register custom test markers."""
    config.addinivalue_line("markers", "unit: Unit tests that don't require external resources")
    config.addinivalue_line("markers", "integration: Integration tests that may use files or the Textual pilot")
