"""Helpers for building test stores and checking todo lists in tests.

Setup helpers write a populated JSON store into a given directory; the
assertion helpers raise AssertionError with a descriptive message.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from .locate import new_store
from .lookup import find_by_position
from .models import Collection, Todo, TodoError, TodoStatus
from .query import FindResult
from .store import Store

PathLike = Union[str, "os.PathLike[str]"]


@dataclass
class TodoSpec:
    """Description of a todo, and optionally its children, to create in a test."""

    text: str
    status: Union[TodoStatus, str] = TodoStatus.PENDING
    children: List["TodoSpec"] = field(default_factory=list)


def create_test_todo(position: int, text: str, status: Union[TodoStatus, str]) -> Todo:
    """Return a todo with a fresh id at the given position."""
    return Todo(id=str(uuid.uuid4()), position=position, text=text, status=status)


def _saved_store(directory: PathLike, collection: Collection) -> Store:
    store = new_store(os.path.join(os.fspath(directory), "test.json"))
    store.save(collection)
    return store


def create_populated_store(directory: PathLike, *args: str) -> Store:
    """Return a file store in directory holding one pending todo per text in args."""
    collection = Collection()
    for text in args:
        collection.create_todo(text, "")
    return _saved_store(directory, collection)


def create_store_with_specs(directory: PathLike, specs: Iterable[TodoSpec]) -> Store:
    """Return a file store in directory holding root todos with the given statuses."""
    collection = Collection()
    for spec in specs:
        todo = collection.create_todo(spec.text, "")
        todo.status = spec.status
    return _saved_store(directory, collection)


def _add_from_spec(collection: Collection, spec: TodoSpec, parent_id: str) -> None:
    todo = collection.create_todo(spec.text, parent_id)
    todo.status = spec.status
    for child in spec.children:
        _add_from_spec(collection, child, todo.id)


def create_store_with_nested_specs(directory: PathLike, specs: Iterable[TodoSpec]) -> Store:
    """Return a file store in directory holding the nested tree the specs describe."""
    collection = Collection()
    for spec in specs:
        _add_from_spec(collection, spec, "")
    return _saved_store(directory, collection)


def create_nested_store(directory: PathLike) -> Store:
    """Return a file store with this tree::

        1 Parent todo
          1.1 Sub-task 1.1
          1.2 Sub-task 1.2
            1.2.1 Grandchild 1.2.1
        2 Another top-level todo
    """
    collection = Collection()
    parent = collection.create_todo("Parent todo", "")
    collection.create_todo("Sub-task 1.1", parent.id)
    sub_task = collection.create_todo("Sub-task 1.2", parent.id)
    collection.create_todo("Grandchild 1.2.1", sub_task.id)
    collection.create_todo("Another top-level todo", "")
    return _saved_store(directory, collection)


def new_test_collection(*args: Todo) -> Collection:
    """Return a collection holding the given todos."""
    return Collection(list(args))


def assert_todo_in_list(todos: Sequence[Todo], expected_text: str) -> Todo:
    """Assert a todo with the text is in the list, and return it."""
    for todo in todos:
        if todo.text == expected_text:
            return todo
    raise AssertionError(
        f"expected todo with text {expected_text!r} not found in list of {len(todos)} todos"
    )


def assert_todo_not_in_list(todos: Sequence[Todo], unexpected_text: str) -> None:
    """Assert no todo in the list has the text."""
    if any(todo.text == unexpected_text for todo in todos):
        raise AssertionError(f"unexpected todo with text {unexpected_text!r} found in list")


def assert_todo_count(result: FindResult, expected_total: int, expected_done: int) -> None:
    """Assert the total and done counts of a find result."""
    problems = []
    if result.total_count != expected_total:
        problems.append(f"expected total count {expected_total}, got {result.total_count}")
    if result.done_count != expected_done:
        problems.append(f"expected done count {expected_done}, got {result.done_count}")
    if problems:
        raise AssertionError("; ".join(problems))


def assert_todo_has_status(todo: Todo, expected_status: Union[TodoStatus, str]) -> None:
    """Assert the todo has the expected status."""
    if str(todo.status) != str(expected_status):
        raise AssertionError(
            f"expected todo {todo.text!r} to have status {str(expected_status)!r}, "
            f"got {str(todo.status)!r}"
        )


def assert_collection_size(collection: Collection, expected_size: int) -> None:
    """Assert the collection has the expected number of root todos."""
    actual = len(collection.todos)
    if actual != expected_size:
        raise AssertionError(f"expected collection to have {expected_size} todos, got {actual}")


def assert_todo_by_id(todos: Sequence[Todo], todo_id: str) -> Todo:
    """Assert a todo with the id is in the list, and return it."""
    found: Optional[Todo] = next((todo for todo in todos if todo.id == todo_id), None)
    if found is None:
        raise AssertionError(f"todo with ID {todo_id!r} not found")
    return found


def assert_todo_by_position(todos: Sequence[Todo], position: int) -> Todo:
    """Assert a todo at the position is in the list, and return it."""
    try:
        return find_by_position(Collection(list(todos)), position)
    except TodoError:
        raise AssertionError(f"todo with position {position} not found") from None


__all__ = [
    "Path",
    "TodoSpec",
    "assert_collection_size",
    "assert_todo_by_id",
    "assert_todo_by_position",
    "assert_todo_count",
    "assert_todo_has_status",
    "assert_todo_in_list",
    "assert_todo_not_in_list",
    "create_nested_store",
    "create_populated_store",
    "create_store_with_nested_specs",
    "create_store_with_specs",
    "create_test_todo",
    "new_test_collection",
]