"""Watch loop wiring a change detector to the update trigger."""

import logging
from collections.abc import Callable

from workflowsync.update.outcome import UpdateResult
from workflowsync.update.trigger import UpdateTrigger
from workflowsync.watch.detector import ChangeDetector

logger = logging.getLogger(__name__)


class WatchService:
    """Feeds every change event to the trigger, one at a time, in order."""

    def __init__(
        self,
        detector: ChangeDetector,
        trigger: UpdateTrigger,
        on_result: Callable[[UpdateResult], None] | None = None,
    ):
        self.detector = detector
        self.trigger = trigger
        self.on_result = on_result
        self.handled = 0

    def run(self, max_events: int | None = None) -> int:
        """Consume events until the detector is closed.

        Args:
            max_events: Stop after this many events (None runs forever).

        Returns:
            Number of events handled during this call.
        """
        handled = 0
        logger.debug(f"Watch loop started ({self.detector.mode})")

        for event in self.detector.subscribe():
            result = self.trigger.handle(event)
            handled += 1
            self.handled += 1
            if self.on_result:
                self.on_result(result)
            if max_events is not None and handled >= max_events:
                break

        return handled

    def stop(self) -> None:
        self.detector.close()
