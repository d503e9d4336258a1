"""Fatal error conditions that abort a cleanup run."""


class ReaperError(Exception):
    """Base class for errors that stop the whole invocation."""


class LockHeldError(ReaperError):
    """Another docker-reaper instance already holds the host lock."""

    def __init__(self, lock_file):
        self.lock_file = lock_file
        super().__init__(f"Another instance is running (lock held on {lock_file})")


class RuntimeUnavailableError(ReaperError):
    """The Docker daemon cannot be reached at all."""
