"""Event-driven detector backed by watchdog filesystem notifications.

The watchdog observer runs on its own thread and only enqueues events;
the consumer drains the queue in arrival order, one event per
qualifying modification with no coalescing.
"""

import logging
import queue
from collections.abc import Callable, Iterator
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler, FileSystemMovedEvent
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from workflowsync.watch.detector import ChangeDetector, ChangeEvent, WatchTarget

logger = logging.getLogger(__name__)


class QueueingHandler(FileSystemEventHandler):
    """Turns qualifying modification events into queued ChangeEvents."""

    def __init__(self, target: WatchTarget, events: "queue.Queue[ChangeEvent]"):
        super().__init__()
        self.target = target
        self.events = events

    def _enqueue(self, path: str | bytes) -> None:
        if isinstance(path, bytes):
            path = path.decode()
        if self.target.matches(path):
            self.events.put(ChangeEvent(path=Path(path)))

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._enqueue(event.src_path)

    def on_moved(self, event: FileSystemMovedEvent) -> None:
        # Atomic saves rename a temp file over the watched one
        if not event.is_directory:
            self._enqueue(event.dest_path)


class EventDrivenDetector(ChangeDetector):
    """Detects changes through native filesystem notifications."""

    def __init__(
        self,
        target: WatchTarget,
        observer_factory: Callable[[], BaseObserver] = Observer,
        idle_timeout: float = 0.5,
    ):
        super().__init__(target)
        self._observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self._events: queue.Queue[ChangeEvent] = queue.Queue()
        self._idle_timeout = idle_timeout
        self._closed = False

    @property
    def mode(self) -> str:
        return "events"

    @property
    def running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def start(self) -> None:
        """Start the observer thread.

        Raises:
            OSError: If the platform cannot watch the directory (missing
                directory, inotify limits, ...).
        """
        if self.running:
            return

        observer = self._observer_factory()
        handler = QueueingHandler(self.target, self._events)
        observer.schedule(handler, str(self.target.directory), recursive=False)
        try:
            observer.start()
        except OSError:
            observer.stop()
            raise
        self._observer = observer
        self._closed = False
        logger.debug(f"Observer started for {self.target.directory}")

    def _ensure_observer(self) -> None:
        """Restart the observer if its thread died underneath us."""
        if self._closed or self.running:
            return
        logger.error("Watcher error: observer stopped unexpectedly, restarting")
        try:
            self.start()
        except OSError as e:
            logger.error(f"Watcher error: {e}")

    def subscribe(self) -> Iterator[ChangeEvent]:
        if not self.running:
            self.start()
        self._closed = False

        while not self._closed:
            try:
                event = self._events.get(timeout=self._idle_timeout)
            except queue.Empty:
                self._ensure_observer()
                continue
            yield event

    def close(self) -> None:
        self._closed = True
        observer, self._observer = self._observer, None
        if observer is None:
            return
        observer.stop()
        if observer.is_alive():
            observer.join()
        logger.debug("Observer stopped")
