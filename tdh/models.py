"""Todo items, collections of todos, and the position bookkeeping between them."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterator, List, Optional

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_POSITION_RE = re.compile(r"[+-]?[0-9]+")


class TodoStatus(str, Enum):
    """Status of a todo item."""

    PENDING = "pending"
    DONE = "done"

    def __str__(self) -> str:
        return self.value


class TodoError(Exception):
    """Raised when a todo cannot be found, created or addressed."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(kw_only=True)
class Todo:
    """A single task, possibly holding child tasks."""

    id: str = ""
    parent_id: str = ""
    position: int = 0
    text: str = ""
    status: TodoStatus | str = TodoStatus.PENDING
    modified: datetime = ZERO_TIME
    items: List["Todo"] = field(default_factory=list)

    def clone(self) -> "Todo":
        """Return a deep copy of this todo and all its descendants."""
        return replace(self, items=[item.clone() for item in self.items])

    def set_status(
        self,
        status: TodoStatus | str,
        collection: "Collection",
        skip_reorder: bool = False,
    ) -> None:
        """Change the status, keeping positions consistent among siblings."""
        changed = self.status != status
        self.status = status
        self.modified = _now()

        if status == TodoStatus.DONE:
            self.position = 0

        if not skip_reorder and changed:
            if self.parent_id:
                collection.reset_sibling_positions(self.parent_id)
            else:
                collection.reset_root_positions()

    def mark_complete(self, collection: "Collection", skip_reorder: bool = False) -> None:
        """Mark this todo as done."""
        self.set_status(TodoStatus.DONE, collection, skip_reorder)

    def mark_pending(self, collection: "Collection", skip_reorder: bool = False) -> None:
        """Mark this todo as pending."""
        self.set_status(TodoStatus.PENDING, collection, skip_reorder)

    @property
    def short_id(self) -> str:
        """The first seven characters of the id."""
        return self.id[:7]

    def position_path(self, collection: "Collection") -> str:
        """Dot-notation path of this todo in the collection; empty when done."""
        if self.status == TodoStatus.DONE:
            return ""
        return _find_path(collection.todos, self, "")


def _find_path(todos: List[Todo], target: Todo, current: str) -> str:
    for todo in todos:
        path = f"{current}.{todo.position}" if current else str(todo.position)
        if todo.id == target.id:
            return path
        found = _find_path(todo.items, target, path)
        if found:
            return found
    return ""


@dataclass
class Collection:
    """An ordered list of top-level todos."""

    todos: List[Todo] = field(default_factory=list)

    def create_todo(self, text: str, parent_id: str = "") -> Todo:
        """Create a pending todo at the root or under the given parent."""
        todo = Todo(
            id=_new_id(),
            parent_id=parent_id,
            text=text,
            status=TodoStatus.PENDING,
            modified=_now(),
        )
        if not parent_id:
            siblings = self.todos
        else:
            parent = self.find_item_by_id(parent_id)
            if parent is None:
                raise TodoError(f"parent todo with ID {parent_id} not found")
            siblings = parent.items
        todo.position = max((t.position for t in siblings), default=0) + 1
        todo.position = max(todo.position, 1)
        siblings.append(todo)
        return todo

    def clone(self) -> "Collection":
        """Return a deep copy of the collection."""
        return Collection([todo.clone() for todo in self.todos or []])

    def reorder(self) -> None:
        """Give pending root todos positions 1..n and move done ones to the end."""
        reset_active_positions(self.todos)

    def reset_sibling_positions(self, parent_id: str) -> None:
        """Reset positions among the children of the given parent."""
        parent = self.find_item_by_id(parent_id)
        if parent is not None and parent.items:
            reset_active_positions(parent.items)

    def reset_root_positions(self) -> None:
        """Reset positions among root-level todos."""
        if self.todos:
            reset_active_positions(self.todos)

    def walk(self) -> Iterator[Todo]:
        """Yield every todo in the tree, depth first."""
        stack = list(reversed(self.todos))
        while stack:
            todo = stack.pop()
            yield todo
            stack.extend(reversed(todo.items))

    def find_item_by_id(self, todo_id: str) -> Optional[Todo]:
        """Return the todo with this id anywhere in the tree, or None."""
        return next((todo for todo in self.walk() if todo.id == todo_id), None)

    def find_item_by_ref(self, ref: str) -> Todo:
        """Find a todo by position path (e.g. "1.2") or by short id."""
        try:
            return self.find_item_by_position_path(ref)
        except TodoError:
            return self.find_item_by_short_id(ref)

    def find_item_by_short_id(self, short_id: str) -> Todo:
        """Find the single todo whose id starts with the given prefix."""
        matches = [todo for todo in self.walk() if todo.id.startswith(short_id)]
        if not matches:
            raise TodoError(f"no todo found with reference '{short_id}'")
        if len(matches) > 1:
            raise TodoError(
                f"multiple todos found with ambiguous reference '{short_id}'"
            )
        return matches[0]

    def find_item_by_position_path(self, path: str) -> Todo:
        """Find a todo by its dot-notation position path such as "1.2.3"."""
        if path == "":
            raise TodoError("empty path")
        todos = self.todos
        found: Optional[Todo] = None
        for position in _parse_position_path(path):
            found = next((t for t in todos if t.position == position), None)
            if found is None:
                raise TodoError(f"no item found at position {position}")
            todos = found.items
        assert found is not None
        return found

    def list_active(self) -> List[Todo]:
        """Copies of pending todos; children of done todos are hidden."""
        return _filter_todos(self.todos, lambda t: t.status == TodoStatus.PENDING)

    def list_archived(self) -> List[Todo]:
        """Copies of done todos, without their children."""
        return _filter_todos(self.todos, lambda t: t.status == TodoStatus.DONE)

    def list_all(self) -> List[Todo]:
        """Deep copies of all todos regardless of status."""
        return [todo.clone() for todo in self.todos]


def _parse_position_path(path: str) -> List[int]:
    positions = []
    for part in path.split("."):
        stripped = part.strip()
        if not _POSITION_RE.fullmatch(stripped):
            raise TodoError(f"invalid position '{part}' in path")
        position = int(stripped)
        if position < 1:
            raise TodoError(f"position must be >= 1, got {position}")
        positions.append(position)
    return positions


def _filter_todos(todos: List[Todo], predicate: Callable[[Todo], bool]) -> List[Todo]:
    filtered = []
    for todo in todos:
        if not predicate(todo):
            continue
        copy = replace(todo, items=[])
        if todo.status != TodoStatus.DONE:
            copy.items = _filter_todos(todo.items, predicate)
        filtered.append(copy)
    return filtered


def migrate_collection(collection: Collection) -> None:
    """Give every todo an id and link children to their parents."""
    for todo in collection.todos:
        _migrate_todo(todo)


def _migrate_todo(todo: Todo) -> None:
    if not todo.id:
        todo.id = _new_id()
    if todo.items is None:
        todo.items = []
    for child in todo.items:
        if not child.parent_id:
            child.parent_id = todo.id
        _migrate_todo(child)


def reorder_todos(todos: List[Todo]) -> None:
    """Sort by position and renumber 1..n in place, recursively."""
    todos.sort(key=lambda t: t.position)
    for index, todo in enumerate(todos, start=1):
        todo.position = index
        if todo.items:
            reorder_todos(todo.items)


def reset_active_positions(todos: List[Todo]) -> None:
    """Reorder in place: active todos first, then reopened ones, then done ones."""
    if not todos:
        return
    active: List[Todo] = []
    reopened: List[Todo] = []
    done: List[Todo] = []
    for todo in todos:
        if todo.status == TodoStatus.DONE:
            todo.position = 0
            done.append(todo)
        elif todo.position == 0:
            reopened.append(todo)
        else:
            active.append(todo)

    active.sort(key=lambda t: t.position)
    combined = active + reopened
    for index, todo in enumerate(combined, start=1):
        todo.position = index
    todos[:] = combined + done