"""Change detection for watched workflow directories.

Two interchangeable detectors:
- EventDrivenDetector: watchdog filesystem notifications
- PollingDetector: fixed-interval mtime watermark scan (fallback)
"""

import logging

from workflowsync.watch.detector import ChangeDetector, ChangeEvent, WatchTarget
from workflowsync.watch.native import EventDrivenDetector, QueueingHandler
from workflowsync.watch.polling import DEFAULT_POLL_INTERVAL, PollingDetector

logger = logging.getLogger(__name__)


def select_detector(
    target: WatchTarget,
    force_polling: bool = False,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> ChangeDetector:
    """Pick the detector for this run.

    Tries native notifications first and falls back to polling when the
    observer cannot be started on this platform or directory.
    """
    if not force_polling:
        detector = EventDrivenDetector(target)
        try:
            detector.start()
        except OSError as e:
            logger.warning(f"File notifications unavailable ({e}), falling back to polling")
        else:
            return detector

    return PollingDetector(target, poll_interval=poll_interval)


__all__ = [
    "ChangeDetector",
    "ChangeEvent",
    "WatchTarget",
    "EventDrivenDetector",
    "QueueingHandler",
    "PollingDetector",
    "DEFAULT_POLL_INTERVAL",
    "select_detector",
]
