from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest


def entry(file: str, command: str | None = None, directory: str = "/src", output: str | None = None) -> dict:
    row = {
        "directory": directory,
        "command": command or f"cc -c {file}",
        "file": file,
    }
    if output is not None:
        row["output"] = output
    return row


@pytest.fixture
def write_compdb() -> Callable[..., Path]:
    def _write(path: Path, *entries: dict) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(list(entries), indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_entry() -> Callable[..., dict]:
    return entry
