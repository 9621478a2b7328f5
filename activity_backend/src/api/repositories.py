from __future__ import annotations

import copy
import json
import os
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from functools import lru_cache
from threading import RLock
from typing import Iterable, Iterator, List

import structlog

from .errors import PersistenceError
from .models import ActivityEntity
from .settings import get_settings

logger = structlog.get_logger(__name__)


# PUBLIC_INTERFACE
class ActivityStore(ABC):
    """
    Storage port for the activity collection.

    The whole collection is read by load() and rewritten by save(); there are no
    partial updates.
    """

    backend_name: str = "abstract"

    def __init__(self) -> None:
        self._lock = RLock()

    @contextmanager
    def locked(self) -> Iterator[None]:
        """
        Mutual-exclusion scope for a load-mutate-save sequence on this store.
        """
        with self._lock:
            yield

    @abstractmethod
    def load(self) -> List[ActivityEntity]:
        """Return the full collection in insertion order."""

    @abstractmethod
    def save(self, activities: Iterable[ActivityEntity]) -> None:
        """Replace the stored collection. Raise PersistenceError on failure."""


class InMemoryStore(ActivityStore):
    """
    Process-local store suitable for testing and ephemeral runtime.
    """

    backend_name = "memory"

    def __init__(self, activities: Iterable[ActivityEntity] = ()) -> None:
        super().__init__()
        self._items: List[ActivityEntity] = copy.deepcopy(list(activities))

    def load(self) -> List[ActivityEntity]:
        with self._lock:
            return copy.deepcopy(self._items)

    def save(self, activities: Iterable[ActivityEntity]) -> None:
        with self._lock:
            self._items = copy.deepcopy(list(activities))


class JsonFileStore(ActivityStore):
    """
    Store keeping the collection as a single JSON array on disk, replaced
    atomically on every save.

    The parent directory and an empty document are created on construction.
    Read failures degrade to an empty collection; write failures raise
    PersistenceError.
    """

    backend_name = "json"

    def __init__(self, path: str) -> None:
        super().__init__()
        self._path = path
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        if not os.path.exists(path):
            self._write([])

    @property
    def path(self) -> str:
        return self._path

    def _write(self, activities: List[ActivityEntity]) -> None:
        # Write beside the target and swap it in; the old document stays intact on failure
        fd, tmp_path = tempfile.mkstemp(
            prefix=".activities-", suffix=".tmp", dir=os.path.dirname(self._path) or "."
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(activities, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def load(self) -> List[ActivityEntity]:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("activities_read_failed", path=self._path, error=str(e))
            return []
        if not isinstance(data, list):
            logger.error("activities_document_invalid", path=self._path, kind=type(data).__name__)
            return []
        return [item for item in data if isinstance(item, dict)]

    def save(self, activities: Iterable[ActivityEntity]) -> None:
        items = list(activities)
        try:
            self._write(items)
        except (OSError, TypeError, ValueError) as e:
            logger.error("activities_write_failed", path=self._path, error=str(e))
            raise PersistenceError("Failed to save activities") from e


@lru_cache(maxsize=None)
def _store_for(backend: str, path: str) -> ActivityStore:
    if backend == "memory":
        return InMemoryStore()
    return JsonFileStore(path)


# PUBLIC_INTERFACE
def get_store() -> ActivityStore:
    """
    Return the configured store, one instance per backend/path for the process.
    - json: JsonFileStore at ACTIVITIES_FILE
    - memory: InMemoryStore
    """
    settings = get_settings()
    return _store_for(settings.persistence_backend, settings.activities_file)
