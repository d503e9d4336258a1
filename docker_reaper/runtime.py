import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterable, List, Optional

import docker
import requests

from .errors import RuntimeUnavailableError
from .models import ContainerRef, ImageRef

logger = logging.getLogger(__name__)


class Runtime(ABC):
    """Snapshot queries and per-item mutations against a container runtime.

    Queries return point-in-time lists and are never cached. Mutations take a
    whole batch, keep going past individual failures and return how many items
    were confirmed removed. Only a runtime that cannot be reached at all
    raises, with RuntimeUnavailableError.
    """

    @abstractmethod
    def list_containers(self, status: Optional[str] = None, exit_code: Optional[int] = None) -> List[ContainerRef]:
        """
        List containers, running or not, optionally filtered.

        Args:
            status (Optional[str]): Only containers in this state, e.g. "exited".
            exit_code (Optional[int]): Only containers whose last exit code matches.

        Returns:
            List[ContainerRef]: The matching containers, full ids.
        """

    @abstractmethod
    def list_images(self, dangling_only: bool = False) -> List[ImageRef]:
        """
        List images with full ids.

        Args:
            dangling_only (bool): Only images without any repository:tag.

        Returns:
            List[ImageRef]: Every known image, intermediate layers included,
                or just the dangling ones.
        """

    @abstractmethod
    def inspect_container_image(self, container: ContainerRef) -> Optional[str]:
        """
        Resolve the full id of the image backing a container.

        Returns:
            Optional[str]: The image id, or None if the container is gone.
        """

    @abstractmethod
    def remove_containers(self, containers: Iterable[ContainerRef], remove_volumes: bool = True) -> int:
        """Remove containers (and their anonymous volumes); returns the number removed."""

    @abstractmethod
    def remove_images(self, images: Iterable[ImageRef]) -> int:
        """Remove images; returns the number the runtime confirmed as deleted."""


@contextmanager
def _daemon_errors():
    try:
        yield
    except requests.exceptions.RequestException as e:
        raise RuntimeUnavailableError(f"Lost connection to Docker daemon: {e}") from e
    except docker.errors.DockerException as e:
        raise RuntimeUnavailableError(f"Docker daemon failed to answer: {e}") from e


class DockerRuntime(Runtime):
    """Runtime backed by the Docker Engine API through the docker SDK."""

    def __init__(self, client: docker.DockerClient):
        self.client = client

    @classmethod
    def from_env(cls) -> "DockerRuntime":
        """Connects to the daemon configured by the environment and verifies it answers."""
        try:
            client = docker.from_env()
            client.ping()  # Verify connection
        except docker.errors.DockerException as e:
            if "Permission denied" in str(e):
                raise RuntimeUnavailableError(
                    "Could not connect to Docker daemon: Permission denied. "
                    "Please ensure the user is in the 'docker' group."
                ) from e
            raise RuntimeUnavailableError(f"Could not connect to Docker daemon: {e}") from e
        except requests.exceptions.RequestException as e:
            raise RuntimeUnavailableError(f"Could not connect to Docker daemon: {e}") from e
        return cls(client)

    def list_containers(self, status=None, exit_code=None):
        filters = {}
        if status is not None:
            filters["status"] = status
        if exit_code is not None:
            filters["exited"] = exit_code
        with _daemon_errors():
            containers = self.client.containers.list(all=True, filters=filters, ignore_removed=True)
        return [
            ContainerRef(
                id=container.id,
                status=container.status,
                exit_code=container.attrs.get("State", {}).get("ExitCode", 0),
            )
            for container in containers
        ]

    def list_images(self, dangling_only=False):
        with _daemon_errors():
            if dangling_only:
                images = self.client.images.list(filters={"dangling": True})
            else:
                images = self.client.images.list(all=True)
        return [ImageRef(id=image.id, tags=tuple(image.tags)) for image in images]

    def inspect_container_image(self, container):
        with _daemon_errors():
            try:
                return self.client.api.inspect_container(container.id)["Image"]
            except docker.errors.NotFound:
                logger.debug(f"Container {container.short_id} disappeared before inspection")
                return None

    def remove_containers(self, containers, remove_volumes=True):
        removed = 0
        with _daemon_errors():
            for container in containers:
                try:
                    self.client.api.remove_container(container.id, v=remove_volumes)
                except docker.errors.NotFound:
                    logger.warning(f"Container {container.short_id} was already removed")
                    continue
                except docker.errors.APIError as e:
                    logger.warning(f"Failed to remove container {container.short_id}: {e.explanation or e}")
                    continue
                logger.info(f"Removed container {container.short_id}")
                removed += 1
        return removed

    def remove_images(self, images):
        """
        Removes each image and counts the candidates the daemon reported under "Deleted".

        Deleting a child image also deletes its untagged parent layers, so a
        parent that failed earlier with a conflict, or that is already gone by
        its own turn, still counts once the child's response lists it.
        """
        images = list(images)
        candidates = {image.id for image in images}
        deleted = set()
        with _daemon_errors():
            for image in images:
                if image.id in deleted:
                    continue
                try:
                    response = self.client.api.remove_image(image.id)
                except docker.errors.NotFound:
                    logger.warning(f"Image {image.short_id} was already removed")
                    continue
                except docker.errors.APIError as e:
                    logger.warning(f"Failed to remove image {image.short_id}: {e.explanation or e}")
                    continue
                reported = _deleted_ids(response)
                if image.id in reported:
                    logger.info(f"Removed image {image.short_id}")
                else:
                    logger.warning(f"Image {image.short_id} was untagged but not deleted")
                deleted.update(reported)
        return len(deleted & candidates)


def _deleted_ids(response) -> set:
    """Ids a remove_image response lists under "Deleted"."""
    return {entry["Deleted"] for entry in response or [] if entry.get("Deleted")}
