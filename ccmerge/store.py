from __future__ import annotations
from typing import Dict, Iterable, Iterator, List, Optional
from .schemas import CompileCommand


class RecordStore:
    """Merged compile commands keyed by source file; the last record loaded for a file wins.

    Not thread safe. The store belongs to whichever control flow runs the
    initial merge and the watch loop.
    """

    def __init__(self):
        self._records: Dict[str, CompileCommand] = {}

    def update(self, records: Iterable[CompileCommand]) -> int:
        n = 0
        for rec in records:
            self._records[rec.file] = rec
            n += 1
        return n

    def get(self, file: str) -> Optional[CompileCommand]:
        return self._records.get(file)

    def records(self) -> List[CompileCommand]:
        return [self._records[k] for k in sorted(self._records)]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, file: object) -> bool:
        return file in self._records

    def __iter__(self) -> Iterator[CompileCommand]:
        return iter(self.records())
