"""Finding root todos by position and changing one inside a transaction."""

from __future__ import annotations

from typing import Callable

from .locate import new_store
from .models import Collection, Todo, TodoError


def find_by_position(collection: Collection, position: int) -> Todo:
    """Return the root-level todo at the given position."""
    for todo in collection.todos:
        if todo.position == position:
            return todo
    raise TodoError(f"todo with position {position} was not found")


def find(collection: Collection, position: int) -> Todo:
    """Alias of :func:`find_by_position`."""
    return find_by_position(collection, position)


def transact_on_todo(
    collection_path: str,
    position: int,
    action: Callable[[Todo, Collection], None],
) -> None:
    """Load the store, run action on the todo at position, and save.

    Nothing is saved if the todo is missing or the action raises.
    """
    store = new_store(collection_path)

    def apply(collection: Collection) -> None:
        action(find_by_position(collection, position), collection)

    store.update(apply)