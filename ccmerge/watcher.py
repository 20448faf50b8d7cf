from __future__ import annotations
import enum, os, queue, threading
from typing import Iterable, List, Optional, Tuple
from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver
from .pipeline import load_file, scan
from .sinks import write_json
from .store import RecordStore
from .utils import logger, same_path

CREATED = "created"
MODIFIED = "modified"

Change = Tuple[str, List[str]]


class State(enum.Enum):
    INITIALIZING = "initializing"
    WATCHING = "watching"
    STOPPED = "stopped"


class WatchSetupError(RuntimeError):
    pass


def classify(event: FileSystemEvent) -> Optional[Change]:
    """Reduce a watchdog event to (created|modified, paths), or None if irrelevant."""
    if event.is_directory:
        return None
    if event.event_type == EVENT_TYPE_CREATED:
        return CREATED, [os.fsdecode(event.src_path)]
    if event.event_type == EVENT_TYPE_MODIFIED:
        return MODIFIED, [os.fsdecode(event.src_path)]
    if event.event_type == EVENT_TYPE_MOVED:
        # a file renamed into place is new content at the destination
        return CREATED, [os.fsdecode(event.dest_path)]
    return None


class QueueingHandler(FileSystemEventHandler):
    """Runs on the observer thread; only hands normalized changes to the loop."""

    def __init__(self, events: "queue.Queue[Change]"):
        super().__init__()
        self.events = events

    def on_any_event(self, event):
        change = classify(event)
        if change is not None:
            self.events.put(change)


class Watcher:
    def __init__(self, directories: Iterable[str], store: RecordStore, output: str,
                 input_name: str = "compile_commands.json", *, indent: int = 2,
                 use_polling: bool = False, poll_seconds: float = 1.0, queue_timeout: float = 0.5,
                 read_retries: int = 3, retry_delay: float = 0.2):
        self.directories = list(directories)
        self.store = store
        self.output = output
        self.input_name = input_name
        self.indent = indent
        self.use_polling = use_polling
        self.poll_seconds = poll_seconds
        self.queue_timeout = queue_timeout
        self.read_retries = read_retries
        self.retry_delay = retry_delay

        self.state = State.INITIALIZING
        self.events: "queue.Queue[Change]" = queue.Queue()
        self.watched: List[str] = []
        self._stop = threading.Event()
        self._observer = None

    @classmethod
    def from_config(cls, cfg: dict, store: RecordStore) -> "Watcher":
        w = cfg["watch"]
        return cls(
            cfg["directories"], store, cfg["output"], cfg["input_name"],
            indent=cfg["output_indent"],
            use_polling=w["use_polling"],
            poll_seconds=w["poll_seconds"],
            queue_timeout=w["queue_timeout"],
            read_retries=w["read_retries"],
            retry_delay=w["retry_delay"],
        )

    def _observe(self):
        observer = PollingObserver(timeout=self.poll_seconds) if self.use_polling else Observer()
        handler = QueueingHandler(self.events)
        watched = []
        for d in self.directories:
            if not os.path.isdir(d):
                logger.warning(f"Directory '{d}' does not exist or is not a directory. Skipping.")
                continue
            observer.schedule(handler, d, recursive=True)
            watched.append(d)
        try:
            observer.start()
        except OSError:
            if all(os.path.isdir(d) for d in watched):
                raise
            # a root vanished after the check above; rebuild without it
            observer.stop()
            return self._observe()
        return observer, watched

    def start(self):
        """Register recursive watches on every existing root. Raises WatchSetupError."""
        try:
            self._observer, self.watched = self._observe()
        except OSError as e:
            raise WatchSetupError(f"Failed to create watcher: {e}") from e
        for d in self.watched:
            logger.info(f"Watching directory: {d}")
        self.state = State.WATCHING

    def _healthy(self) -> bool:
        obs = self._observer
        return obs is not None and obs.is_alive() and all(e.is_alive() for e in obs.emitters)

    def _recover(self):
        logger.error("File watcher stopped unexpectedly; re-registering watches")
        old, self._observer = self._observer, None
        if old is not None:
            old.stop()
        try:
            self._observer, self.watched = self._observe()
        except OSError as e:
            logger.error(f"Watcher error: {e}")

    def handle(self, kind: str, paths: Iterable[str]) -> int:
        """Reload and rewrite for each path naming an input file. Returns how many were handled."""
        if kind not in (CREATED, MODIFIED):
            return 0
        handled = 0
        for path in paths:
            if os.path.basename(path) != self.input_name or same_path(path, self.output):
                continue
            logger.info(f"Change detected in: {path}")
            load_file(path, self.store, retries=self.read_retries, delay=self.retry_delay)
            try:
                write_json(self.store, self.output, indent=self.indent)
            except OSError as e:
                logger.error(f"Failed to update combined file {self.output}: {e}")
            handled += 1
        return handled

    def run(self, stop: Optional[threading.Event] = None):
        """Process changes until ``stop`` (or ``self.stop()``) is signalled."""
        if stop is not None:
            self._stop = stop
        if self.state is State.INITIALIZING:
            self.start()
        logger.info(f"Watching for changes to {self.input_name} files...")
        try:
            while not self._stop.is_set():
                try:
                    kind, paths = self.events.get(timeout=self.queue_timeout)
                except queue.Empty:
                    if not self._stop.is_set() and not self._healthy():
                        self._recover()
                    continue
                self.handle(kind, paths)
        finally:
            self.stop()

    def stop(self):
        self._stop.set()
        obs, self._observer = self._observer, None
        if obs is not None:
            obs.stop()
            if obs.is_alive():
                obs.join(timeout=5)
        self.state = State.STOPPED


def run(cfg: dict, stop: Optional[threading.Event] = None) -> RecordStore:
    """Initial merge and write, then watch unless ``watch.enabled`` is false.

    An OSError from the initial write propagates; nothing is watched in that case.
    """
    store = RecordStore()
    logger.info(f"Combining existing {cfg['input_name']} files...")
    scan(cfg["directories"], store, cfg["input_name"], output=cfg["output"])
    write_json(store, cfg["output"], indent=cfg["output_indent"])
    if cfg["watch"]["enabled"]:
        Watcher.from_config(cfg, store).run(stop)
    return store
