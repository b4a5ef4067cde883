"""Finding the todo database file and building stores for it."""

from __future__ import annotations

import functools
import os
from pathlib import Path

from .store import JsonFileStore, MemoryStore, Store

ENV_VAR = "TODO_DB_PATH"
LOCAL_DB_NAME = ".todos"
HOME_DB_NAME = ".todos.json"


class NotAFileError(Exception):
    """Raised when the database path points to a directory, not a file."""


class LocalDbFileNotFoundError(Exception):
    """Raised when no .todos file exists in the current or any parent directory."""


def _try_dir(directory: Path) -> str:
    db_path = directory / LOCAL_DB_NAME
    if db_path.stat() and db_path.is_dir():
        raise NotAFileError(f"{db_path}: database path is not a file")
    return str(db_path)


def _try_cwd_and_parent_folders() -> str:
    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents):
        try:
            return _try_dir(directory)
        except (OSError, NotAFileError):
            continue
    raise LocalDbFileNotFoundError(
        "no .todos file found in current or parent directories"
    )


def _home_db_path() -> str:
    try:
        home = Path.home()
    except (RuntimeError, KeyError):
        return HOME_DB_NAME
    return os.path.join(str(home), HOME_DB_NAME)


@functools.lru_cache(maxsize=None)
def calculate_db_path() -> str:
    """Resolve the database path, caching the answer.

    Looks for a .todos file in the current directory and its parents, then
    at the TODO_DB_PATH environment variable, then falls back to
    ~/.todos.json.
    """
    try:
        return _try_cwd_and_parent_folders()
    except (OSError, LocalDbFileNotFoundError):
        pass

    env_path = os.environ.get(ENV_VAR, "")
    if env_path:
        return env_path

    return _home_db_path()


def new_store(path: str = "") -> Store:
    """Return a JSON file store at path, or at the resolved default path."""
    if not path:
        path = calculate_db_path()
    return JsonFileStore(path)


def new_memory_store() -> Store:
    """Return an empty in-memory store."""
    return MemoryStore()


def reset_cache() -> None:
    """Forget the cached database path."""
    calculate_db_path.cache_clear()