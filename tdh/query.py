"""Queries over todo lists and the results of running them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .models import Todo, TodoStatus


@dataclass(frozen=True)
class Query:
    """Criteria for finding todos; unset criteria match everything.

    All criteria that are set must match (logical AND).
    """

    status: Optional[str] = None
    text_contains: Optional[str] = None
    case_sensitive: bool = False

    def matches(self, todo: Todo) -> bool:
        """Return True when the todo satisfies every criterion that is set."""
        if self.status is not None and str(todo.status) != str(self.status):
            return False

        if self.text_contains is not None:
            text = todo.text
            needle = self.text_contains
            if not self.case_sensitive:
                text = text.lower()
                needle = needle.lower()
            if needle not in text:
                return False

        return True

    def filter_todos(self, todos: Iterable[Todo]) -> List[Todo]:
        """Return the todos that match, in their original order."""
        return [todo for todo in todos if self.matches(todo)]


@dataclass
class FindResult:
    """Todos matched by a query, with counts over the whole collection."""

    todos: List[Todo] = field(default_factory=list)
    total_count: int = 0
    done_count: int = 0


def count_todos(todos: Optional[Iterable[Todo]]) -> Tuple[int, int]:
    """Return (total, done) over the todos and all their descendants."""
    total = 0
    done = 0
    for todo in todos or ():
        total += 1
        if todo.status == TodoStatus.DONE:
            done += 1
        child_total, child_done = count_todos(todo.items)
        total += child_total
        done += child_done
    return total, done