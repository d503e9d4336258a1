from docker_reaper.errors import RuntimeUnavailableError
from docker_reaper.models import ContainerRef, ImageRef
from docker_reaper.runtime import Runtime


def container(id, status="exited", exit_code=0):
    return ContainerRef(id=id, status=status, exit_code=exit_code)


def image(id, *tags):
    return ImageRef(id=id, tags=tuple(tags))


class FakeRuntime(Runtime):
    """In-memory runtime recording every mutation call."""

    def __init__(self, containers=None, images=None, container_images=None, failing=None):
        self.containers = list(containers or [])
        self.images = list(images or [])
        # container id -> image id
        self.container_images = dict(container_images or {})
        # ids whose removal the runtime refuses
        self.failing = set(failing or [])
        self.unavailable = False
        self.removed_containers = []
        self.removed_images = []
        self.remove_container_calls = []
        self.remove_image_calls = []

    def _check(self):
        if self.unavailable:
            raise RuntimeUnavailableError("daemon down")

    def list_containers(self, status=None, exit_code=None):
        self._check()
        return [
            c for c in self.containers
            if (status is None or c.status == status) and (exit_code is None or c.exit_code == exit_code)
        ]

    def list_images(self, dangling_only=False):
        self._check()
        return [i for i in self.images if not (dangling_only and i.tagged)]

    def inspect_container_image(self, container):
        self._check()
        return self.container_images.get(container.id)

    def remove_containers(self, containers, remove_volumes=True):
        self._check()
        containers = list(containers)
        self.remove_container_calls.append((containers, remove_volumes))
        removed = 0
        for c in containers:
            if c.id in self.failing:
                continue
            self.containers = [x for x in self.containers if x.id != c.id]
            self.removed_containers.append(c.id)
            removed += 1
        return removed

    def remove_images(self, images):
        self._check()
        images = list(images)
        self.remove_image_calls.append(images)
        removed = 0
        for i in images:
            if i.id in self.failing:
                continue
            self.images = [x for x in self.images if x.id != i.id]
            self.removed_images.append(i.id)
            removed += 1
        return removed
