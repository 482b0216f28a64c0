"""Result types for an update cycle.

Each step of the cycle reports an explicit status instead of raising:
- readiness probe of the datastore
- recreation of the import container
- bounded wait for the import container to exit
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from workflowsync.watch.detector import ChangeEvent

READY_STEP = "ready"
RECREATE_STEP = "recreate"
WAIT_STEP = "wait"


class StepStatus(str, Enum):
    """Status of one step in the update cycle."""

    OK = "ok"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    SKIPPED = "skipped"


class UpdateOutcome(str, Enum):
    """Overall outcome of an update cycle."""

    UPDATED = "updated"  # Import ran; wait may have run out of patience
    NOT_READY = "not_ready"  # Datastore not reachable, nothing was touched
    COMPLETED_WITH_WARNINGS = "completed_with_warnings"  # Container step failed
    ERROR = "error"  # Unexpected exception


@dataclass
class StepResult:
    """Result of a single step."""

    name: str
    status: StepStatus
    detail: str = ""
    commands: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.OK


@dataclass
class UpdateResult:
    """Result of one update cycle for a change event."""

    event: ChangeEvent | None
    outcome: UpdateOutcome
    steps: list[StepResult] = field(default_factory=list)
    started_at: datetime | None = None
    ended_at: datetime | None = None
    error: str | None = None

    @property
    def is_success(self) -> bool:
        return self.outcome == UpdateOutcome.UPDATED

    @property
    def timed_out(self) -> bool:
        """True when the import was started but never seen exiting."""
        wait = self.step(WAIT_STEP)
        return wait is not None and wait.status == StepStatus.TIMED_OUT

    @property
    def duration_seconds(self) -> float | None:
        if self.started_at and self.ended_at:
            return (self.ended_at - self.started_at).total_seconds()
        return None

    def step(self, name: str) -> StepResult | None:
        for step in self.steps:
            if step.name == name:
                return step
        return None

    @property
    def message(self) -> str:
        """Human-readable summary line."""
        if self.outcome == UpdateOutcome.UPDATED:
            if self.timed_out:
                return "Workflow updated (import still running, check logs)"
            return "Workflow updated successfully!"
        if self.outcome == UpdateOutcome.NOT_READY:
            return "PostgreSQL not ready. Waiting..."
        if self.outcome == UpdateOutcome.COMPLETED_WITH_WARNINGS:
            return "Import completed (check logs if issues)"
        return f"Error updating workflows: {self.error}"
