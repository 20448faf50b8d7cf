from __future__ import annotations

from ccmerge.schemas import CompileCommand
from ccmerge.store import RecordStore


def _cmd(file: str, command: str = "cc -c") -> CompileCommand:
    return CompileCommand(directory="/src", command=f"{command} {file}", file=file)


def test_distinct_files_are_unioned() -> None:
    store = RecordStore()
    assert store.update([_cmd("a.c"), _cmd("b.c")]) == 2
    assert store.update([_cmd("c.c")]) == 1

    assert len(store) == 3
    assert [r.file for r in store.records()] == ["a.c", "b.c", "c.c"]


def test_last_record_for_a_file_wins() -> None:
    store = RecordStore()
    store.update([_cmd("a.c", "gcc")])
    store.update([_cmd("a.c", "clang")])

    assert len(store) == 1
    assert store.get("a.c").command == "clang a.c"


def test_duplicates_within_one_batch_keep_the_later_one() -> None:
    store = RecordStore()
    assert store.update([_cmd("a.c", "first"), _cmd("a.c", "second")]) == 2
    assert len(store) == 1
    assert store.get("a.c").command == "second a.c"


def test_membership_and_iteration() -> None:
    store = RecordStore()
    store.update([_cmd("z.c"), _cmd("m.c")])

    assert "z.c" in store
    assert "nope.c" not in store
    assert store.get("nope.c") is None
    assert [r.file for r in store] == ["m.c", "z.c"]
