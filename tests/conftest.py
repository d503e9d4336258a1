import pytest
import docker
from unittest.mock import MagicMock

from tests.helpers import FakeRuntime


@pytest.fixture
def fake_runtime():
    def _fake_runtime(**kwargs):
        return FakeRuntime(**kwargs)

    return _fake_runtime


@pytest.fixture
def docker_client():
    """Fixture to create a mock Docker client."""
    client = MagicMock(spec=docker.DockerClient)
    client.containers = MagicMock()
    client.images = MagicMock()
    client.api = MagicMock(spec=docker.APIClient)
    return client
