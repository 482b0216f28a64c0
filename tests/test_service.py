"""Tests for the watch loop."""

import os
from collections.abc import Iterator
from pathlib import Path

from workflowsync.service import WatchService
from workflowsync.update import UpdateOutcome, UpdateResult, UpdateTrigger
from workflowsync.watch import ChangeDetector, ChangeEvent, PollingDetector, WatchTarget


class ListDetector(ChangeDetector):
    """Detector replaying a fixed list of events."""

    def __init__(self, names: list[str]):
        super().__init__(WatchTarget(Path("/workflows")))
        self.names = names
        self.closed = False

    @property
    def mode(self) -> str:
        return "events"

    def subscribe(self) -> Iterator[ChangeEvent]:
        for name in self.names:
            if self.closed:
                return
            yield ChangeEvent(path=self.target.directory / name)

    def close(self) -> None:
        self.closed = True


class TestWatchService:
    """Tests for WatchService."""

    def test_each_event_runs_a_full_cycle(self, trigger: UpdateTrigger, runner):
        """A burst of N events causes N sequential update cycles."""
        runner.script("inspect", "exited")
        results: list[UpdateResult] = []
        service = WatchService(ListDetector(["a.json", "b.json", "a.json"]), trigger, on_result=results.append)

        handled = service.run()

        assert handled == 3
        assert [r.event.name for r in results] == ["a.json", "b.json", "a.json"]
        assert runner.operations() == ["exec", "rm", "up", "inspect"] * 3

    def test_continues_after_errors(self, trigger: UpdateTrigger, runner):
        """ERROR and NOT_READY outcomes never stop the loop."""
        runner.script("exec", ValueError("boom"), 1, 0)
        runner.script("inspect", "exited")
        results: list[UpdateResult] = []
        service = WatchService(ListDetector(["a.json", "b.json", "c.json"]), trigger, on_result=results.append)

        service.run()

        assert [r.outcome for r in results] == [
            UpdateOutcome.ERROR,
            UpdateOutcome.NOT_READY,
            UpdateOutcome.UPDATED,
        ]

    def test_max_events(self, trigger: UpdateTrigger):
        """run() can stop after a fixed number of events."""
        service = WatchService(ListDetector(["a.json", "b.json", "c.json"]), trigger)

        assert service.run(max_events=2) == 2
        assert service.handled == 2

    def test_stop_closes_detector(self, trigger: UpdateTrigger):
        """stop() closes the detector."""
        detector = ListDetector([])
        WatchService(detector, trigger).stop()
        assert detector.closed

    def test_polling_end_to_end(self, tmp_path: Path, trigger: UpdateTrigger, runner):
        """Polling detector events flow into the trigger."""
        runner.script("inspect", "exited")
        workflow = tmp_path / "workflow.json"
        workflow.write_text("{}")
        os.utime(workflow, (1000, 1000))

        detector = PollingDetector(WatchTarget(tmp_path), sleep=lambda _: None)
        results: list[UpdateResult] = []

        WatchService(detector, trigger, on_result=results.append).run(max_events=1)

        assert results[0].event.path == workflow
        assert results[0].is_success
