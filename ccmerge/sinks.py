from __future__ import annotations
import json, os, stat, tempfile
from .store import RecordStore
from .utils import logger, ensure_parent_dir


def dump_json(store: RecordStore, indent: int = 2) -> str:
    rows = [rec.model_dump(exclude_none=True) for rec in store.records()]
    return json.dumps(rows, indent=indent) + "\n"


def _file_mode(path: str) -> int:
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_json(store: RecordStore, path: str, *, indent: int = 2) -> int:
    """Replace ``path`` with the full contents of ``store``. OSError propagates.

    A symlinked ``path`` is written through to its target. The target keeps its
    permissions; a new file gets the default mode for the current umask.
    """
    content = dump_json(store, indent)
    target = os.path.realpath(path)
    ensure_parent_dir(target)
    mode = _file_mode(target)
    fd, tmp = tempfile.mkstemp(prefix=".ccmerge-", suffix=".tmp", dir=os.path.dirname(target))
    try:
        os.chmod(tmp, mode)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, target)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    logger.info(f"Updated combined compile_commands.json with {len(store)} entries.")
    return len(store)
