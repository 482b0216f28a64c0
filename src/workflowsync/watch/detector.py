"""Change detector interface shared by the event-driven and polling variants."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path


@dataclass(frozen=True)
class WatchTarget:
    """A directory plus the file suffix that qualifies entries inside it.

    Only direct children are considered, and dotfiles never qualify.
    """

    directory: Path
    suffix: str = ".json"

    def __post_init__(self) -> None:
        object.__setattr__(self, "directory", Path(self.directory).absolute())

    def matches(self, path: str | Path) -> bool:
        """Check whether ``path`` is a qualifying file of this target."""
        candidate = Path(path).absolute()
        if candidate.parent != self.directory:
            return False
        if candidate.name.startswith("."):
            return False
        return candidate.name.endswith(self.suffix)


@dataclass(frozen=True)
class ChangeEvent:
    """A detected change to a single watched file."""

    path: Path
    detected_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def name(self) -> str:
        return self.path.name


class ChangeDetector(ABC):
    """Abstract source of change events for a WatchTarget."""

    def __init__(self, target: WatchTarget):
        self.target = target

    @property
    @abstractmethod
    def mode(self) -> str:
        """Short name of the detection strategy ('events' or 'polling')."""
        ...

    @abstractmethod
    def subscribe(self) -> Iterator[ChangeEvent]:
        """Yield change events forever.

        The iterator is lazy and may be abandoned and re-created; detector
        state (such as the polling watermark) survives across subscriptions.
        """
        ...

    def close(self) -> None:
        """Release any resources held by the detector."""
        return None

    def __enter__(self) -> "ChangeDetector":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
