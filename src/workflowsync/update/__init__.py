"""Container-driven workflow import triggered by file changes."""

from workflowsync.update.outcome import (
    READY_STEP,
    RECREATE_STEP,
    WAIT_STEP,
    StepResult,
    StepStatus,
    UpdateOutcome,
    UpdateResult,
)
from workflowsync.update.runtime import (
    CommandResult,
    CommandRunner,
    ComposeRuntime,
    SubprocessRunner,
)
from workflowsync.update.trigger import UpdateTrigger

__all__ = [
    "READY_STEP",
    "RECREATE_STEP",
    "WAIT_STEP",
    "StepResult",
    "StepStatus",
    "UpdateOutcome",
    "UpdateResult",
    "CommandResult",
    "CommandRunner",
    "ComposeRuntime",
    "SubprocessRunner",
    "UpdateTrigger",
]
