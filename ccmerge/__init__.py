"""
ccmerge package: merge per-build compile_commands.json files and keep the result current:
- discovery: pruned walk for input files under each root
- pipeline: parse/validate one input file → record store
- store: records keyed by source file, last load wins
- sinks: merged JSON output
- watcher: watchdog event loop driving pipeline + sinks
- schemas: compile command model
- utils: config, logging, retry
"""

__all__ = [
    "discovery",
    "pipeline",
    "store",
    "sinks",
    "watcher",
    "schemas",
    "utils",
    "cli",
]

__version__ = "0.1.0"

from dotenv import load_dotenv

load_dotenv()
