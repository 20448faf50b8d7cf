from __future__ import annotations

import json
import os
import stat
from pathlib import Path

import pytest

from ccmerge.schemas import CompileCommand
from ccmerge.sinks import dump_json, write_json
from ccmerge.store import RecordStore


def _store() -> RecordStore:
    store = RecordStore()
    store.update(
        [
            CompileCommand(directory="/b", command="cc -c z.c", file="z.c", output="z.o"),
            CompileCommand(directory="/a", command="cc -c a.c", file="a.c"),
        ]
    )
    return store


def test_output_is_a_sorted_array_and_omits_unknown_output(tmp_path: Path) -> None:
    out = tmp_path / "compile_commands.json"
    assert write_json(_store(), str(out)) == 2

    rows = json.loads(out.read_text(encoding="utf-8"))
    assert rows == [
        {"directory": "/a", "command": "cc -c a.c", "file": "a.c"},
        {"directory": "/b", "command": "cc -c z.c", "file": "z.c", "output": "z.o"},
    ]


def test_repeated_writes_are_byte_identical(tmp_path: Path) -> None:
    out = tmp_path / "compile_commands.json"
    store = _store()

    write_json(store, str(out))
    first = out.read_bytes()
    write_json(store, str(out))

    assert out.read_bytes() == first


def test_write_replaces_previous_contents(tmp_path: Path) -> None:
    out = tmp_path / "compile_commands.json"
    out.write_text("x" * 10_000, encoding="utf-8")

    write_json(RecordStore(), str(out))

    assert json.loads(out.read_text(encoding="utf-8")) == []
    assert [p.name for p in tmp_path.iterdir()] == ["compile_commands.json"]


def test_missing_parent_directories_are_created(tmp_path: Path) -> None:
    out = tmp_path / "deep" / "er" / "compile_commands.json"
    write_json(_store(), str(out))
    assert out.exists()


def test_write_error_propagates_and_leaves_no_temp_file(tmp_path: Path) -> None:
    out = tmp_path / "compile_commands.json"
    out.mkdir()

    with pytest.raises(OSError):
        write_json(_store(), str(out))
    assert [p.name for p in tmp_path.iterdir()] == ["compile_commands.json"]


def test_dump_json_indent() -> None:
    assert dump_json(_store(), indent=4).startswith('[\n    {\n        "directory"')


def test_symlinked_output_is_written_through(tmp_path: Path) -> None:
    real = tmp_path / "build" / "merged.json"
    real.parent.mkdir()
    real.write_text("[]", encoding="utf-8")
    link = tmp_path / "compile_commands.json"
    link.symlink_to(real)

    write_json(_store(), str(link))

    assert link.is_symlink()
    assert [r["file"] for r in json.loads(real.read_text(encoding="utf-8"))] == ["a.c", "z.c"]


def test_existing_output_keeps_its_permissions(tmp_path: Path) -> None:
    out = tmp_path / "compile_commands.json"
    out.write_text("[]", encoding="utf-8")
    out.chmod(0o640)

    write_json(_store(), str(out))

    assert stat.S_IMODE(out.stat().st_mode) == 0o640


def test_new_output_honours_umask(tmp_path: Path) -> None:
    out = tmp_path / "compile_commands.json"
    old = os.umask(0o077)
    try:
        write_json(_store(), str(out))
    finally:
        os.umask(old)

    assert stat.S_IMODE(out.stat().st_mode) == 0o600
