"""Fixed-interval polling detector.

Keeps a single watermark: the newest modification time seen across all
qualifying files. A tick reports a change only when the newest file is
strictly newer than the watermark, so at most one event is produced per
tick no matter how many files were written in between.
"""

import logging
import os
import time
from collections.abc import Callable, Iterator
from pathlib import Path

from workflowsync.watch.detector import ChangeDetector, ChangeEvent, WatchTarget

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0


class PollingDetector(ChangeDetector):
    """Detects changes by comparing the newest mtime against a watermark."""

    def __init__(
        self,
        target: WatchTarget,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__(target)
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._watermark: float = 0
        self._closed = False

    @property
    def mode(self) -> str:
        return "polling"

    @property
    def watermark(self) -> float:
        """Newest modification time reported so far."""
        return self._watermark

    def _latest_file(self) -> tuple[Path, float] | None:
        """Find the qualifying file with the newest mtime.

        Ties keep the first file encountered. Raises OSError if the
        directory or any entry cannot be read.
        """
        latest: tuple[Path, float] | None = None
        with os.scandir(self.target.directory) as entries:
            for entry in entries:
                path = Path(entry.path)
                if not entry.is_file() or not self.target.matches(path):
                    continue
                mtime = entry.stat().st_mtime
                if latest is None or mtime > latest[1]:
                    latest = (path, mtime)
        return latest

    def poll_once(self) -> ChangeEvent | None:
        """Run a single tick.

        Returns:
            A ChangeEvent for the newest file if it advanced the watermark,
            otherwise None. Read errors skip the tick.
        """
        try:
            latest = self._latest_file()
        except OSError as e:
            logger.debug(f"Skipping poll tick: {e}")
            return None

        if latest is None:
            return None

        path, mtime = latest
        if mtime > self._watermark:
            self._watermark = mtime
            return ChangeEvent(path=path)
        return None

    def subscribe(self) -> Iterator[ChangeEvent]:
        self._closed = False
        while not self._closed:
            self._sleep(self.poll_interval)
            if self._closed:
                break
            event = self.poll_once()
            if event is not None:
                yield event

    def close(self) -> None:
        self._closed = True
