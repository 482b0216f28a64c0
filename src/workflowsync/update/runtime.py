"""Command execution boundary for the container runtime.

Everything that talks to docker goes through a CommandRunner so the
update sequence can be exercised without a daemon.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one external command."""

    args: list[str]
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    error: str | None = None  # Set when the command could not be launched

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out and self.error is None

    def describe(self) -> str:
        """One-line description for log messages."""
        cmd = " ".join(self.args)
        if self.timed_out:
            return f"{cmd}: timed out"
        if self.error:
            return f"{cmd}: {self.error}"
        detail = self.stderr.strip().splitlines()[-1] if self.stderr.strip() else ""
        return f"{cmd}: exit {self.returncode}" + (f" ({detail})" if detail else "")


class CommandRunner(ABC):
    """Runs an external command synchronously."""

    @abstractmethod
    def run(self, args: Sequence[str], timeout: float | None = None) -> CommandResult:
        ...


class SubprocessRunner(CommandRunner):
    """CommandRunner backed by subprocess.run."""

    def __init__(self, cwd: str | None = None):
        self.cwd = cwd

    def run(self, args: Sequence[str], timeout: float | None = None) -> CommandResult:
        argv = list(args)
        logger.debug(f"Running: {' '.join(argv)}")
        try:
            proc = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout,
                cwd=self.cwd,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(args=argv, timed_out=True)
        except OSError as e:
            return CommandResult(args=argv, error=f"{type(e).__name__}: {e}")

        return CommandResult(
            args=argv,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )


class ComposeRuntime:
    """The four docker operations the update sequence needs."""

    def __init__(self, runner: CommandRunner, compose_cmd: Sequence[str] = ("docker", "compose")):
        self.runner = runner
        self.compose_cmd = list(compose_cmd)

    def query_datastore(
        self,
        service: str,
        user: str,
        database: str,
        query: str = "SELECT 1",
        timeout: float | None = None,
    ) -> CommandResult:
        """Run a psql query inside the running datastore service."""
        return self.runner.run(
            [*self.compose_cmd, "exec", "-T", service, "psql", "-U", user, "-d", database, "-c", query],
            timeout=timeout,
        )

    def remove_service(self, service: str) -> CommandResult:
        """Remove the service container; succeeds when it does not exist."""
        return self.runner.run([*self.compose_cmd, "rm", "-f", service])

    def start_service_detached(self, service: str) -> CommandResult:
        return self.runner.run([*self.compose_cmd, "up", "-d", service])

    def inspect_status(self, container: str, timeout: float | None = None) -> str | None:
        """Lifecycle status of a container, or None if it cannot be inspected."""
        result = self.runner.run(
            ["docker", "inspect", "-f", "{{.State.Status}}", container],
            timeout=timeout,
        )
        if not result.ok:
            return None
        return result.stdout.strip() or None
