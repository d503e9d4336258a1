import logging
import time
from typing import Callable, List, Optional

from .config import ReaperOptions
from .models import ALL_MODES, CleanupReport, ContainerRef, ImageRef, Mode
from .runtime import Runtime
from .selection import Selector

logger = logging.getLogger(__name__)


class Reaper:
    """Drives selection then removal for each cleanup mode and reports the counts."""

    def __init__(self, runtime: Runtime, options: Optional[ReaperOptions] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.runtime = runtime
        self.options = options or ReaperOptions()
        self.selector = Selector(runtime)
        self._sleep = sleep

    def remove_containers(self, containers: List[ContainerRef], mode: Mode = Mode.EXITED_CONTAINERS) -> CleanupReport:
        """Removes containers along with their anonymous volumes."""
        if not containers:
            return CleanupReport(mode, dry_run=self.options.dry_run)
        if self.options.dry_run:
            for container in containers:
                logger.info(f"Would remove container {container.short_id} (status: {container.status}, exit code: {container.exit_code})")
            return CleanupReport(mode, considered=len(containers), dry_run=True)
        removed = self.runtime.remove_containers(containers, remove_volumes=True)
        return CleanupReport(mode, considered=len(containers), removed=removed)

    def remove_images(self, images: List[ImageRef], mode: Mode = Mode.DANGLING_IMAGES) -> CleanupReport:
        """Removes images, counting only those the runtime confirms as deleted."""
        if not images:
            return CleanupReport(mode, dry_run=self.options.dry_run)
        if self.options.dry_run:
            for image in images:
                tags = list(image.tags) if image.tags else ["<dangling>"]
                logger.info(f"Would remove image {image.short_id} with tags: {tags}")
            return CleanupReport(mode, considered=len(images), dry_run=True)
        removed = self.runtime.remove_images(images)
        return CleanupReport(mode, considered=len(images), removed=removed)

    def exited_containers(self) -> CleanupReport:
        return self._finish(self.remove_containers(self.selector.select_exited_containers(), Mode.EXITED_CONTAINERS))

    def dead_containers(self) -> CleanupReport:
        return self._finish(self.remove_containers(self.selector.select_dead_containers(), Mode.DEAD_CONTAINERS))

    def failed_containers(self) -> CleanupReport:
        return self._finish(self.remove_containers(self.selector.select_failed_containers(), Mode.FAILED_CONTAINERS))

    def dangling_images(self) -> CleanupReport:
        return self._finish(self.remove_images(self.selector.select_dangling_images(), Mode.DANGLING_IMAGES))

    def unused_images(self) -> CleanupReport:
        """
        Removes every image no container references.

        A container can start on a freshly pulled image right after the
        snapshot, so deletion waits out the settling delay first. The wait
        narrows that window; it does not close it.
        """
        images = self.selector.select_unused_images()
        if images and not self.options.dry_run and self.options.settle_delay > 0:
            logger.info(f"Found {len(images)} unused image(s), waiting {self.options.settle_delay:g}s before removal")
            self._sleep(self.options.settle_delay)
        return self._finish(self.remove_images(images, Mode.UNUSED_IMAGES))

    def run(self, mode: Mode) -> CleanupReport:
        handlers = {
            Mode.EXITED_CONTAINERS: self.exited_containers,
            Mode.DEAD_CONTAINERS: self.dead_containers,
            Mode.FAILED_CONTAINERS: self.failed_containers,
            Mode.DANGLING_IMAGES: self.dangling_images,
            Mode.UNUSED_IMAGES: self.unused_images,
        }
        logger.debug(f"Cleaning up {mode.value}")
        return handlers[mode]()

    def run_all(self, modes=ALL_MODES) -> List[CleanupReport]:
        """Runs modes one after another in the canonical order, whatever order they were given in."""
        return [self.run(mode) for mode in ALL_MODES if mode in modes]

    @staticmethod
    def _finish(report: CleanupReport) -> CleanupReport:
        logger.info(report.summary())
        return report
