"""Runtime settings for the workflow watcher.

Defaults mirror the docker compose layout the tool was written for:
- workflows exported to n8n/backup/workflows
- a one-shot ``n8n-import`` service that imports them and exits
- a ``postgres`` service backing n8n
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_WORKFLOWS_DIR = Path("n8n") / "backup" / "workflows"
DEFAULT_CONTAINER = "n8n-import"


class WatchSettings(BaseModel):
    """Validated settings shared by the detector and the update trigger."""

    model_config = ConfigDict(frozen=True)

    workflows_dir: Path = DEFAULT_WORKFLOWS_DIR
    suffix: str = ".json"
    container: str = DEFAULT_CONTAINER

    # Readiness probe target
    db_service: str = "postgres"
    db_user: str = "n8n"
    db_name: str = "n8n"

    # Timing (seconds)
    poll_interval: float = Field(default=2.0, gt=0)
    ready_timeout: float = Field(default=5.0, gt=0)
    wait_timeout: float = Field(default=30.0, gt=0)
    wait_interval: float = Field(default=0.5, gt=0)

    force_polling: bool = False

    @field_validator("suffix")
    @classmethod
    def _suffix_has_dot(cls, value: str) -> str:
        if not value.startswith("."):
            raise ValueError("suffix must start with '.'")
        return value

    @field_validator("container", "db_service", "db_user", "db_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value
