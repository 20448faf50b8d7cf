from __future__ import annotations
from typing import Iterable, List, Optional
from pydantic import ValidationError
from .discovery import find_input_files
from .schemas import CompileCommand, CompileCommands
from .store import RecordStore
from .utils import logger, retry, Retryable


def read_input(path: str) -> List[CompileCommand]:
    with open(path, "rb") as f:
        return CompileCommands.validate_json(f.read())


def load_file(path: str, store: RecordStore, *, retries: int = 1, delay: float = 0.0) -> Optional[int]:
    """Load every command in ``path`` into ``store``.

    The whole file is parsed and validated before the store is touched, so a
    bad file contributes nothing. Returns the number of records ingested, or
    None if the file could not be read or parsed.
    """

    @retry(times=max(1, retries), delay=delay)
    def attempt() -> List[CompileCommand]:
        try:
            return read_input(path)
        except (OSError, ValidationError) as e:
            raise Retryable(e) from e

    try:
        commands = attempt()
    except Retryable as e:
        cause = e.__cause__ or e
        logger.error(f"Failed to load {path}: {cause}")
        return None
    n = store.update(commands)
    logger.info(f"Adding entries from: {path} ({n} entries)")
    return n


def merge_files(paths: Iterable[str], store: RecordStore, **kwargs) -> int:
    total = 0
    for path in paths:
        n = load_file(path, store, **kwargs)
        if n is not None:
            total += n
    return total


def scan(directories: Iterable[str], store: RecordStore, input_name: str = "compile_commands.json",
         output: Optional[str] = None) -> int:
    """Discover and load every input file under ``directories``. Missing roots are skipped."""
    exclude = [output] if output else []
    total = 0
    for root in directories:
        total += merge_files(find_input_files(root, input_name, exclude=exclude), store)
    return total
