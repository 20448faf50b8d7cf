from __future__ import annotations
import os
from typing import Iterable, List
from .utils import logger, same_path


def find_input_files(root: str, input_name: str = "compile_commands.json",
                     exclude: Iterable[str] = ()) -> List[str]:
    """Return every ``input_name`` file under ``root``.

    Once a directory holds a match its subdirectories are not walked, so a
    build tree nested inside another build tree is not reported twice.
    Paths in ``exclude`` (normally the merged output) are skipped and do not
    prune.
    """
    if not os.path.isdir(root):
        logger.warning(f"Directory '{root}' does not exist or is not a directory. Skipping.")
        return []

    exclude = list(exclude)
    found: List[str] = []

    def on_error(err: OSError):
        logger.error(f"Error reading directory entry: {err}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames.sort()
        if input_name not in filenames:
            continue
        path = os.path.join(dirpath, input_name)
        if any(same_path(path, ex) for ex in exclude):
            continue
        found.append(path)
        dirnames[:] = []
    return found
