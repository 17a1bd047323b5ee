"""Directory-scoped synchronization gates for concurrent write commits.

Write tasks from one write stage run in parallel but must not commit output
metadata at the same time. They serialize through a gate keyed by resource:

    with gate.hold("job-commit"):
        commit_partition(...)

acquire() blocks (no busy-waiting) until the key is free. hold() releases on
success and on failure.

DirectorySynchronizationGate keeps one lock file per key inside its directory
and locks it with fcntl.flock, so tasks in different processes sharing the
directory also serialize. Constructing a gate performs no I/O; the directory
is created on first acquire().
"""

import fcntl
import os
import re
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from cdapio.core.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def lock_file_name(resource_key: str) -> str:
    """Map a resource key to a lock file name inside the gate directory."""
    if not resource_key:
        raise ValueError("resource_key cannot be empty")
    return f"{_UNSAFE_KEY_CHARS.sub('_', resource_key)}.lock"


class _KeyedGate:
    """In-process bookkeeping of held keys, shared by both gate implementations."""

    def __init__(self, directory: str) -> None:
        self._directory = directory
        self._cond = threading.Condition()
        self._held: set[str] = set()

    @property
    def directory(self) -> str:
        return self._directory

    def _reserve(self, resource_key: str) -> None:
        with self._cond:
            while resource_key in self._held:
                self._cond.wait()
            self._held.add(resource_key)

    def _unreserve(self, resource_key: str) -> None:
        with self._cond:
            self._held.discard(resource_key)
            self._cond.notify_all()

    def is_held(self, resource_key: str) -> bool:
        with self._cond:
            return resource_key in self._held

    def acquire(self, resource_key: str) -> None:
        raise NotImplementedError

    def release(self, resource_key: str) -> None:
        raise NotImplementedError

    @contextmanager
    def hold(self, resource_key: str) -> Iterator[None]:
        """Acquire resource_key for the duration of the block."""
        self.acquire(resource_key)
        try:
            yield
        finally:
            self.release(resource_key)


class InMemorySynchronizationGate(_KeyedGate):
    """Thread-only gate. Suitable for tests and single-process runs."""

    def __init__(self, directory: str = "<memory>") -> None:
        super().__init__(directory)

    def acquire(self, resource_key: str) -> None:
        self._reserve(resource_key)

    def release(self, resource_key: str) -> None:
        if not self.is_held(resource_key):
            raise RuntimeError(f"Gate key {resource_key!r} is not held")
        self._unreserve(resource_key)


class DirectorySynchronizationGate(_KeyedGate):
    """Gate backed by flock()ed lock files in a dedicated directory.

    The directory must not be a data output directory (WriteAdapter rejects
    overlapping paths when the output directory is known).
    """

    def __init__(self, locks_dir: str | Path) -> None:
        locks_dir = str(locks_dir)
        if not locks_dir.strip():
            raise ValueError("locks_dir cannot be empty")
        super().__init__(locks_dir)
        self._fds: dict[str, int] = {}

    def lock_path(self, resource_key: str) -> Path:
        return Path(self._directory) / lock_file_name(resource_key)

    def acquire(self, resource_key: str) -> None:
        """Block until resource_key is held by the caller."""
        path = self.lock_path(resource_key)
        self._reserve(resource_key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
            try:
                fcntl.flock(fd, fcntl.LOCK_EX)
            except BaseException:
                os.close(fd)
                raise
        except BaseException:
            self._unreserve(resource_key)
            raise

        with self._cond:
            self._fds[resource_key] = fd
        logger.debug("gate_acquired", directory=self._directory, resource_key=resource_key)

    def release(self, resource_key: str) -> None:
        """Release resource_key.

        Raises:
            RuntimeError: If the key is not held through this gate.
        """
        with self._cond:
            fd = self._fds.pop(resource_key, None)
        if fd is None:
            raise RuntimeError(f"Gate key {resource_key!r} is not held")
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
            self._unreserve(resource_key)
        logger.debug("gate_released", directory=self._directory, resource_key=resource_key)
