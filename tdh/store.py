"""Persistence of todo collections.

Stores load and save a :class:`~tdh.models.Collection`. Saves to disk are
atomic (write to a temporary file, then rename), and :meth:`Store.update`
applies changes to a copy so that a failing update leaves stored data alone.
"""

from __future__ import annotations

import errno
import os
import sys
import tempfile
from abc import ABC, abstractmethod
from contextlib import suppress
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from .codec import dump_todos, load_todos_with_migration
from .models import Collection, migrate_collection
from .query import FindResult, Query, count_todos


class StoreError(Exception):
    """Raised when a store cannot read, decode or write its data."""


class Store(ABC):
    """Interface shared by all storage back ends."""

    @abstractmethod
    def load(self) -> Collection:
        """Return the stored collection."""

    @abstractmethod
    def save(self, collection: Collection) -> None:
        """Persist the collection."""

    @abstractmethod
    def exists(self) -> bool:
        """Return whether the storage exists."""

    @abstractmethod
    def find(self, query: Optional[Query] = None) -> FindResult:
        """Return todos matching the query with counts over the whole tree."""

    @abstractmethod
    def path(self) -> str:
        """Return where the store keeps its data."""

    def update(self, fn: Callable[[Collection], None]) -> None:
        """Apply fn to a copy of the collection and save it if fn does not raise."""
        collection = self.load()
        clone = collection.clone()
        fn(clone)
        self.save(clone)

    def _find_in(self, collection: Collection, query: Optional[Query]) -> FindResult:
        query = query or Query()
        total, done = count_todos(collection.todos)
        return FindResult(
            todos=query.filter_todos(collection.todos or []),
            total_count=total,
            done_count=done,
        )


class JsonFileStore(Store):
    """A store backed by a JSON file."""

    def __init__(self, path: str) -> None:
        self._path = str(path)

    def __repr__(self) -> str:
        return f"JsonFileStore({self._path!r})"

    def load(self) -> Collection:
        try:
            data = Path(self._path).read_bytes()
        except FileNotFoundError:
            return Collection()
        except OSError as err:
            raise StoreError(f"failed to read store file {self._path}: {err}") from err

        try:
            todos = load_todos_with_migration(data)
        except ValueError as err:
            raise StoreError(f"failed to decode JSON from {self._path}: {err}") from err

        collection = Collection(todos)
        needs_migration = any(todo.items is None for todo in todos)
        migrate_collection(collection)

        if needs_migration:
            try:
                self.save(collection)
            except StoreError as err:
                print(f"Warning: Failed to save migrated data: {err}", file=sys.stderr)

        return collection

    def save(self, collection: Collection) -> None:
        try:
            payload = dump_todos(collection.todos).encode("utf-8")
        except (TypeError, ValueError) as err:
            raise StoreError(f"failed to marshal todos to JSON: {err}") from err

        directory = os.path.dirname(self._path) or "."
        try:
            fd, temp_path = tempfile.mkstemp(
                prefix=".todos-", suffix=".json.tmp", dir=directory
            )
        except OSError as err:
            raise StoreError(f"failed to create temp file in {directory}: {err}") from err

        try:
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(payload)
            except OSError as err:
                raise StoreError(
                    f"failed to write data to temp file {temp_path}: {err}"
                ) from err
            try:
                os.replace(temp_path, self._path)
            except OSError as err:
                raise StoreError(f"failed to atomically save file {self._path}: {err}") from err
        finally:
            if os.path.exists(temp_path):
                with suppress(OSError):
                    os.remove(temp_path)

    def exists(self) -> bool:
        try:
            os.stat(self._path)
        except FileNotFoundError:
            return False
        except OSError:
            return True
        return True

    def update(self, fn: Callable[[Collection], None]) -> None:
        super().update(fn)

    def find(self, query: Optional[Query] = None) -> FindResult:
        return self._find_in(self.load(), query)

    def path(self) -> str:
        return self._path


@dataclass
class MemoryStore(Store):
    """A store that keeps its collection in memory, for tests."""

    collection: Collection = field(default_factory=Collection)
    should_fail: bool = False

    def load(self) -> Collection:
        if self.should_fail:
            raise FileNotFoundError(errno.ENOENT, "file does not exist")
        return self.collection

    def save(self, collection: Collection) -> None:
        if self.should_fail:
            raise PermissionError(errno.EACCES, "permission denied")
        self.collection = collection

    def exists(self) -> bool:
        return True

    def update(self, fn: Callable[[Collection], None]) -> None:
        super().update(fn)

    def find(self, query: Optional[Query] = None) -> FindResult:
        if self.should_fail:
            raise FileNotFoundError(errno.ENOENT, "file does not exist")
        return self._find_in(self.collection, query)

    def path(self) -> str:
        return "memory://todos"