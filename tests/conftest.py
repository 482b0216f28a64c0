"""Pytest configuration and fixtures."""

from collections.abc import Sequence

import pytest

from workflowsync.config import WatchSettings
from workflowsync.update.runtime import CommandResult, CommandRunner, ComposeRuntime
from workflowsync.update.trigger import UpdateTrigger


class FakeRunner(CommandRunner):
    """Scripted CommandRunner keyed by docker operation.

    Operations are "exec", "rm", "up" (compose subcommands) and "inspect".
    Scripted items are consumed in order and the last one repeats:
    an int is a return code, a str is stdout of a successful command,
    a dict is CommandResult keyword arguments, an exception is raised.
    """

    def __init__(self):
        self.calls: list[tuple[list[str], float | None]] = []
        self._scripts: dict[str, list[object]] = {}

    def script(self, operation: str, *items: object) -> "FakeRunner":
        self._scripts[operation] = list(items)
        return self

    @staticmethod
    def operation(args: Sequence[str]) -> str:
        if args[1] == "inspect":
            return "inspect"
        return args[2]

    def operations(self) -> list[str]:
        return [self.operation(args) for args, _ in self.calls]

    def run(self, args: Sequence[str], timeout: float | None = None) -> CommandResult:
        argv = list(args)
        self.calls.append((argv, timeout))

        items = self._scripts.get(self.operation(argv), [0])
        item = items.pop(0) if len(items) > 1 else items[0]

        if isinstance(item, BaseException):
            raise item
        if isinstance(item, dict):
            return CommandResult(args=argv, **item)
        if isinstance(item, str):
            return CommandResult(args=argv, returncode=0, stdout=item + "\n")
        return CommandResult(args=argv, returncode=item)


class FakeClock:
    """Monotonic clock that only moves when sleep() is called."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> WatchSettings:
    return WatchSettings()


@pytest.fixture
def trigger(runner: FakeRunner, clock: FakeClock, settings: WatchSettings) -> UpdateTrigger:
    return UpdateTrigger(ComposeRuntime(runner), settings, clock=clock, sleep=clock.sleep)


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="run live tests that talk to a real docker daemon",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "live: mark test as requiring a docker daemon (deselect with '-m \"not live\"')",
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is specified."""
    if config.getoption("--run-live"):
        return

    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)
