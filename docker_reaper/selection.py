import logging
from typing import List, Set

from .models import ContainerRef, ImageRef
from .runtime import Runtime

logger = logging.getLogger(__name__)

FAILED_EXIT_CODE = -1


def _distinct(refs):
    seen = set()
    unique = []
    for ref in refs:
        if ref.id not in seen:
            seen.add(ref.id)
            unique.append(ref)
    return unique


class Selector:
    """Computes removal candidates for each cleanup mode from runtime snapshots.

    Every method only queries the runtime; nothing here mutates it.
    """

    def __init__(self, runtime: Runtime):
        self.runtime = runtime

    def select_exited_containers(self) -> List[ContainerRef]:
        return _distinct(self.runtime.list_containers(status="exited"))

    def select_dead_containers(self) -> List[ContainerRef]:
        return _distinct(self.runtime.list_containers(status="dead"))

    def select_failed_containers(self) -> List[ContainerRef]:
        """Containers whose last exit code is -1, i.e. killed before exiting normally."""
        return _distinct(self.runtime.list_containers(exit_code=FAILED_EXIT_CODE))

    def select_dangling_images(self) -> List[ImageRef]:
        images = self.runtime.list_images(dangling_only=True)
        return _distinct(image for image in images if not image.tagged)

    def used_image_ids(self, containers: List[ContainerRef]) -> Set[str]:
        """Image ids backing the given containers; vanished containers are skipped."""
        used = set()
        for container in containers:
            image_id = self.runtime.inspect_container_image(container)
            if image_id:
                used.add(image_id)
        return used

    def select_unused_images(self) -> List[ImageRef]:
        """
        Every image not backing any container, running or stopped.

        Membership is exact id equality, so an image whose id happens to be a
        prefix of a used image's id is still selected.
        """
        all_images = _distinct(self.runtime.list_images())
        all_containers = self.runtime.list_containers()
        if not all_containers:
            logger.debug(f"No containers found, all {len(all_images)} image(s) are unused")
            return all_images

        used = self.used_image_ids(all_containers)
        unused = [image for image in all_images if image.id not in used]
        logger.debug(
            f"{len(all_images)} image(s), {len(used)} in use by {len(all_containers)} container(s), "
            f"{len(unused)} unused"
        )
        return unused
