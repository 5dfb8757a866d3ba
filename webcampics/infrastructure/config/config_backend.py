"""
Configuration Storage Backends
==============================

Whole-document storage for the camera configuration collection.
The registry loads the full document, mutates it and saves it back inside
transaction(), which serializes read-modify-write cycles on the document.
"""
import copy
import fcntl
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

from webcampics.domain.exceptions import StorageError

logger = logging.getLogger(__name__)

# One mutex and one per-thread nesting depth per collection file, shared by
# every backend instance in the process
_file_locks: Dict[str, Tuple[threading.RLock, threading.local]] = {}
_file_locks_guard = threading.Lock()


def _lock_for(path: Path) -> Tuple[threading.RLock, threading.local]:
    key = str(path.resolve())
    with _file_locks_guard:
        if key not in _file_locks:
            _file_locks[key] = (threading.RLock(), threading.local())
        return _file_locks[key]


class ConfigBackend(ABC):
    """Reads and writes the whole camera collection as a mapping of key -> record."""

    @abstractmethod
    def load(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def save(self, document: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def transaction(self):
        """Context manager that excludes concurrent read-modify-write cycles."""
        pass


class JsonFileConfigBackend(ConfigBackend):
    """
    cameras.json on disk.

    Writes go to a temporary sibling file that is renamed over the target,
    so readers never observe a partially written document. Transactions hold
    a process-wide mutex plus an advisory lock on '<file>.lock' so that
    several worker processes on one host also serialize.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._mutex, self._local = _lock_for(self._path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def _lock_path(self) -> Path:
        return self._path.with_name(self._path.name + ".lock")

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._mutex:
            depth = getattr(self._local, "depth", 0)
            if depth:
                # Re-entrant use from the same thread already holds the file lock
                self._local.depth = depth + 1
                try:
                    yield
                finally:
                    self._local.depth -= 1
                return

            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                lock_file = open(self._lock_path, "a+")
            except OSError as e:
                raise StorageError(f"Failed to lock camera config: {e}") from e
            try:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
                self._local.depth = 1
                try:
                    yield
                finally:
                    self._local.depth = 0
                    fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
            finally:
                lock_file.close()

    def load(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            content = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read camera config: {e}") from e
        if not content.strip():
            return {}
        try:
            document = json.loads(content)
        except ValueError as e:
            raise StorageError(f"Camera config {self._path} is not valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise StorageError(f"Camera config {self._path} must hold a JSON object")
        return document

    def save(self, document: Dict[str, Any]) -> None:
        tmp_name: Optional[str] = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=self._path.name + ".", suffix=".tmp", dir=str(self._path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=4)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as e:
            raise StorageError(f"Failed to write camera config: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass


class InMemoryConfigBackend(ConfigBackend):
    """Process-local document, used by tests and ephemeral deployments."""

    def __init__(self, document: Optional[Dict[str, Any]] = None) -> None:
        self._document: Dict[str, Any] = copy.deepcopy(document or {})
        self._mutex = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._mutex:
            yield

    def load(self) -> Dict[str, Any]:
        return copy.deepcopy(self._document)

    def save(self, document: Dict[str, Any]) -> None:
        self._document = copy.deepcopy(document)
