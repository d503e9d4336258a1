import os

import pytest

from docker_reaper.errors import LockHeldError, ReaperError
from docker_reaper.lock import InstanceLock


@pytest.fixture
def lock_path(tmp_path):
    return tmp_path / "run" / "docker-reaper.lock"


def test_acquire_creates_lock_file_with_pid(lock_path):
    with InstanceLock(lock_path) as lock:
        assert lock.is_held
        assert lock_path.read_text().strip() == str(os.getpid())
    assert not lock.is_held


def test_second_instance_fails_fast(lock_path):
    first = InstanceLock(lock_path).acquire()
    try:
        with pytest.raises(LockHeldError) as excinfo:
            InstanceLock(lock_path).acquire()
        assert "Another instance is running" in str(excinfo.value)
    finally:
        first.release()


def test_release_allows_next_acquisition(lock_path):
    first = InstanceLock(lock_path).acquire()
    first.release()
    second = InstanceLock(lock_path).acquire()
    assert second.is_held
    second.release()


def test_lock_released_when_block_raises(lock_path):
    with pytest.raises(RuntimeError):
        with InstanceLock(lock_path):
            raise RuntimeError("boom")
    with InstanceLock(lock_path) as lock:
        assert lock.is_held


def test_acquire_is_idempotent(lock_path):
    lock = InstanceLock(lock_path)
    assert lock.acquire() is lock.acquire()
    lock.release()
    lock.release()


def test_unopenable_lock_file_is_fatal(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    with pytest.raises(ReaperError, match="Cannot open lock file"):
        InstanceLock(blocker / "docker-reaper.lock").acquire()


def test_failed_pid_write_releases_lock(lock_path, monkeypatch):
    def full_disk(fd, length):
        raise OSError(28, "No space left on device")

    with monkeypatch.context() as m:
        m.setattr("docker_reaper.lock.os.ftruncate", full_disk)
        with pytest.raises(ReaperError, match="Cannot write lock file"):
            InstanceLock(lock_path).acquire()
    with InstanceLock(lock_path) as lock:
        assert lock.is_held
