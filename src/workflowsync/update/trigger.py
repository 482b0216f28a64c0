"""Update trigger: re-run the n8n import container after a workflow change.

The cycle is strictly sequential:
1. Probe the datastore; abort if it is not answering.
2. Remove and recreate the import container.
3. Wait (bounded) for the import container to exit.

Running out of time in step 3 still counts as an update: the import was
started and will usually finish on its own. Nothing is rolled back.
"""

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime

from workflowsync.config import WatchSettings
from workflowsync.update.outcome import (
    READY_STEP,
    RECREATE_STEP,
    WAIT_STEP,
    StepResult,
    StepStatus,
    UpdateOutcome,
    UpdateResult,
)
from workflowsync.update.runtime import ComposeRuntime
from workflowsync.watch.detector import ChangeEvent

logger = logging.getLogger(__name__)

EXITED_STATUS = "exited"


def _skipped(name: str) -> StepResult:
    return StepResult(name=name, status=StepStatus.SKIPPED)


class UpdateTrigger:
    """Runs one update cycle per change event and never raises."""

    def __init__(
        self,
        runtime: ComposeRuntime,
        settings: WatchSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.runtime = runtime
        self.settings = settings or WatchSettings()
        self._clock = clock
        self._sleep = sleep

    def check_ready(self) -> StepResult:
        """Readiness probe against the datastore service."""
        s = self.settings
        result = self.runtime.query_datastore(
            s.db_service, s.db_user, s.db_name, timeout=s.ready_timeout
        )
        if result.ok:
            return StepResult(READY_STEP, StepStatus.OK, commands=[" ".join(result.args)])

        status = StepStatus.TIMED_OUT if result.timed_out else StepStatus.FAILED
        logger.debug(f"Readiness probe failed: {result.describe()}")
        return StepResult(READY_STEP, status, result.describe(), [" ".join(result.args)])

    def recreate(self) -> StepResult:
        """Remove the import container and start it again in the background."""
        container = self.settings.container
        commands: list[str] = []

        for operation in (self.runtime.remove_service, self.runtime.start_service_detached):
            result = operation(container)
            commands.append(" ".join(result.args))
            if not result.ok:
                logger.warning(f"Container command failed: {result.describe()}")
                return StepResult(RECREATE_STEP, StepStatus.FAILED, result.describe(), commands)

        return StepResult(RECREATE_STEP, StepStatus.OK, commands=commands)

    def wait_for_exit(self) -> StepResult:
        """Poll the import container until it exits or the timeout elapses."""
        s = self.settings
        started = self._clock()
        checks = 0
        last_status: str | None = None

        while self._clock() - started < s.wait_timeout:
            # A hung inspect must not outlast the overall wait
            remaining = s.wait_timeout - (self._clock() - started)
            last_status = self.runtime.inspect_status(s.container, timeout=remaining)
            checks += 1
            if last_status == EXITED_STATUS:
                elapsed = self._clock() - started
                return StepResult(
                    WAIT_STEP,
                    StepStatus.OK,
                    f"exited after {checks} checks ({elapsed:.1f}s)",
                )
            # Not visible yet or still running
            self._sleep(s.wait_interval)

        logger.warning(
            f"{s.container} did not exit within {s.wait_timeout:.0f}s "
            f"(last status: {last_status or 'unknown'})"
        )
        return StepResult(
            WAIT_STEP,
            StepStatus.TIMED_OUT,
            f"last status {last_status or 'unknown'} after {checks} checks",
        )

    def _run_cycle(self, event: ChangeEvent | None) -> UpdateResult:
        ready = self.check_ready()
        if not ready.ok:
            return UpdateResult(
                event,
                UpdateOutcome.NOT_READY,
                [ready, _skipped(RECREATE_STEP), _skipped(WAIT_STEP)],
            )

        steps = [ready]
        try:
            recreate = self.recreate()
            steps.append(recreate)
            if not recreate.ok:
                steps.append(_skipped(WAIT_STEP))
                return UpdateResult(event, UpdateOutcome.COMPLETED_WITH_WARNINGS, steps)

            steps.append(self.wait_for_exit())
        except Exception as e:
            logger.warning(f"Import step raised {type(e).__name__}: {e}")
            return UpdateResult(
                event, UpdateOutcome.COMPLETED_WITH_WARNINGS, steps, error=str(e)
            )

        return UpdateResult(event, UpdateOutcome.UPDATED, steps)

    def handle(self, event: ChangeEvent | None = None) -> UpdateResult:
        """Run a full update cycle for ``event``.

        Args:
            event: The change that caused the update, or None for a manual run.

        Returns:
            UpdateResult describing every step. Exceptions are logged and
            reported as UpdateOutcome.ERROR instead of propagating.
        """
        if event is not None:
            logger.info(f"Detected change in: {event.name}")
        logger.info("Updating n8n workflows...")

        started_at = datetime.now(UTC)
        try:
            result = self._run_cycle(event)
        except Exception as e:
            logger.exception(f"Error updating workflows: {e}")
            result = UpdateResult(event, UpdateOutcome.ERROR, error=str(e))

        result.started_at = started_at
        result.ended_at = datetime.now(UTC)
        self._report(result)
        return result

    def _report(self, result: UpdateResult) -> None:
        if result.outcome == UpdateOutcome.UPDATED:
            logger.info(result.message)
        elif result.outcome in (UpdateOutcome.NOT_READY, UpdateOutcome.COMPLETED_WITH_WARNINGS):
            logger.warning(result.message)
