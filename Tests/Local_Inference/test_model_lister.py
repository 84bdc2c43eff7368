"""Tests for GGUF model discovery."""

import pytest

from byte_vision.Local_Inference.model_lister import DirectoryModelLister, ModelFile

pytestmark = pytest.mark.integration


def test_lists_only_gguf_files_sorted(isolated_temp_dir):
    for name in ["b-model.gguf", "a-model.GGUF", "notes.txt"]:
        (isolated_temp_dir / name).write_bytes(b"")
    (isolated_temp_dir / "sub.gguf").mkdir()

    models = DirectoryModelLister(isolated_temp_dir).list()
    assert models == [
        ModelFile("a-model.GGUF", str(isolated_temp_dir / "a-model.GGUF")),
        ModelFile("b-model.gguf", str(isolated_temp_dir / "b-model.gguf")),
    ]


def test_folder_callable_is_read_on_every_call(isolated_temp_dir):
    first = isolated_temp_dir / "first"
    second = isolated_temp_dir / "second"
    first.mkdir()
    second.mkdir()
    (second / "m.gguf").write_bytes(b"")
    current = {"folder": str(first)}

    lister = DirectoryModelLister(lambda: current["folder"])
    assert lister.list() == []
    current["folder"] = str(second)
    assert [m.file_name for m in lister.list()] == ["m.gguf"]


def test_missing_folder_raises(isolated_temp_dir):
    with pytest.raises(FileNotFoundError):
        DirectoryModelLister(isolated_temp_dir / "absent").list()
