import os
from pathlib import Path

import pytest

from tdh.locate import (
    calculate_db_path,
    new_memory_store,
    new_store,
    reset_cache,
)
from tdh.models import Collection
from tdh.store import JsonFileStore, MemoryStore


@pytest.fixture(autouse=True)
def clean_cache(monkeypatch):
    monkeypatch.delenv("TODO_DB_PATH", raising=False)
    reset_cache()
    yield
    reset_cache()


def test_finds_todos_in_current_directory(tmp_path, monkeypatch):
    todos_path = tmp_path / ".todos"
    todos_path.write_text("[]")
    monkeypatch.chdir(tmp_path)

    store = new_store("")

    assert os.path.realpath(store.path()) == os.path.realpath(todos_path)


def test_finds_todos_in_parent_directory(tmp_path, monkeypatch):
    todos_path = tmp_path / ".todos"
    todos_path.write_text("[]")
    sub_dir = tmp_path / "subdir"
    sub_dir.mkdir()
    monkeypatch.chdir(sub_dir)

    store = new_store("")

    assert os.path.realpath(store.path()) == os.path.realpath(todos_path)


def test_uses_environment_variable(tmp_path, monkeypatch):
    env_path = "/custom/path/todos.json"
    monkeypatch.setenv("TODO_DB_PATH", env_path)
    monkeypatch.chdir(tmp_path)

    store = new_store("")

    assert store.path() == env_path


def test_falls_back_to_home_directory(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.chdir(work)

    store = new_store("")

    assert store.path() == os.path.join(str(Path.home()), ".todos.json")


def test_uses_provided_path_if_not_empty():
    store = new_store("/custom/todos.json")
    assert store.path() == "/custom/todos.json"
    assert isinstance(store, JsonFileStore)


def test_directory_named_todos_is_skipped(tmp_path, monkeypatch):
    (tmp_path / ".todos").mkdir()
    monkeypatch.setenv("TODO_DB_PATH", "/env/todos.json")
    monkeypatch.chdir(tmp_path)

    assert calculate_db_path() == "/env/todos.json"


def test_path_is_cached_until_reset(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TODO_DB_PATH", "/first/todos.json")
    assert calculate_db_path() == "/first/todos.json"

    monkeypatch.setenv("TODO_DB_PATH", "/second/todos.json")
    assert calculate_db_path() == "/first/todos.json"

    reset_cache()
    assert calculate_db_path() == "/second/todos.json"


def test_new_memory_store_starts_empty():
    store = new_memory_store()
    assert isinstance(store, MemoryStore)
    assert store.path() == "memory://todos"
    assert store.load() == Collection()