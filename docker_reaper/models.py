from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


class Mode(str, Enum):
    """A single cleanup pass, in the order `--all` runs them."""

    EXITED_CONTAINERS = "exited containers"
    DEAD_CONTAINERS = "dead containers"
    FAILED_CONTAINERS = "failed containers"
    DANGLING_IMAGES = "dangling images"
    UNUSED_IMAGES = "unused images"


CONTAINER_MODES = (Mode.EXITED_CONTAINERS, Mode.DEAD_CONTAINERS, Mode.FAILED_CONTAINERS)
ALL_MODES = tuple(Mode)


@dataclass(frozen=True)
class ContainerRef:
    id: str
    status: str = "created"
    exit_code: int = 0

    @property
    def short_id(self) -> str:
        return self.id[:12]


@dataclass(frozen=True)
class ImageRef:
    id: str
    tags: Tuple[str, ...] = field(default=(), compare=False)

    @property
    def tagged(self) -> bool:
        return bool(self.tags)

    @property
    def short_id(self) -> str:
        return self.id.split(":", 1)[-1][:12]


@dataclass(frozen=True)
class CleanupReport:
    mode: Mode
    considered: int = 0
    removed: int = 0
    dry_run: bool = False

    def summary(self) -> str:
        if self.dry_run:
            return f"{self.mode.value}: {self.considered} would be removed (dry run)"
        return f"{self.mode.value}: removed {self.removed} of {self.considered}"
