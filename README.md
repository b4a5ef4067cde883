# tdh

`tdh` is a library for nested to-do lists. Each todo has a stable UUID and a
position among its siblings. You can point at a todo with a dot path such as
`1.2.3`, or with a short ID made of the first seven characters of its UUID.
Collections are stored as JSON files, and every write is atomic.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Core model (`tdh.models`)

```python
from tdh.models import Collection, TodoStatus

collection = Collection()
groceries = collection.create_todo("Groceries", "")
collection.create_todo("Buy milk", groceries.id)
collection.create_todo("Buy bread", groceries.id)

milk = collection.find_item_by_position_path("1.1")
milk.mark_complete(collection)   # done items get position 0; siblings are renumbered

for todo in collection.list_active():    # copies of pending items; children of done items are hidden
    print(todo.position, todo.text)
```

A `Todo` has the fields `id`, `parent_id`, `position`, `text`, `status`
(`TodoStatus.PENDING` or `TodoStatus.DONE`), `modified` and `items`, which
holds its children.

Changing status:

- `set_status(status, collection, skip_reorder=False)` updates `modified`.
  Marking an item done sets its position to 0. When the status actually
  changes, the positions among the item's siblings are reset, unless
  `skip_reorder` is true.
- `mark_complete` and `mark_pending` are shorthands for `set_status`.

Lookups. Each of these raises `TodoError` when it cannot find the todo:

- `find_item_by_position_path("1.2")` finds a todo by its dot path. Parts may
  be surrounded by spaces, and each part must be an integer of at least 1.
- `find_item_by_short_id(prefix)` finds a todo by a UUID prefix. It raises if
  nothing matches or if more than one todo matches.
- `find_item_by_ref(ref)` tries `ref` as a position path first, then as a
  short ID.

`find_item_by_id(uuid)` returns `None` instead of raising when nothing matches.

Other members:

- `Todo.short_id` and `Todo.position_path(collection)`. The position path is
  an empty string for a done item.
- `Collection.walk()` yields every todo in the tree, depth first.
- `list_archived()` returns copies of the done items, without their children.
  `list_all()` returns a deep copy of the whole tree. `clone()` deep-copies
  a todo or a collection.
- `reorder()`, `reset_root_positions()` and `reset_sibling_positions(parent_id)`
  rearrange one level of the tree in place. Pending items keep their order and
  are numbered from 1. Reopened items, which have position 0, come after them.
  Done items go last, with position 0.
- The module-level functions `reorder_todos`, `reset_active_positions` and
  `migrate_collection` work on lists and collections directly.

## Storage (`tdh.store`, `tdh.locate`)

```python
from tdh.locate import new_store
from tdh.query import Query

store = new_store("")          # empty path: resolve the file location automatically

def add(collection):
    collection.create_todo("Write report", "")

store.update(add)              # runs on a copy; saved only if no exception is raised

result = store.find(Query(text_contains="report"))
print(result.total_count, result.done_count, [t.text for t in result.todos])
```

`JsonFileStore` writes to a temporary file in the same directory and then
renames it over the target. A missing or empty file loads as an empty
collection. Read, decode and write failures raise `StoreError`. `exists()` and
`path()` report on the file.

When `new_store` is given an empty path, it looks for the file in this order,
and caches the result until `reset_cache()` is called:

1. A `.todos` file in the current directory or in any parent directory.
2. The `TODO_DB_PATH` environment variable.
3. `~/.todos.json`.

Older file formats load without any extra step: flat lists with string IDs,
and lists with integer IDs, where the integer becomes the position. Such
files are written back in the current format when they are loaded.

`new_memory_store()` returns a `MemoryStore`, which keeps the collection in
memory. Setting `should_fail = True` makes its operations raise `OSError`.

## Queries (`tdh.query`)

`Query(status=None, text_contains=None, case_sensitive=False)` matches root
todos against every criterion that is set. Text matching ignores case unless
`case_sensitive` is true. A `FindResult` holds the matching `todos`, plus
`total_count` and `done_count`, which are counted over the whole tree.
`count_todos(todos)` returns the same `(total, done)` pair.

## Transactions by position (`tdh.lookup`)

`find_by_position(collection, position)` returns the root todo at that
position and raises `TodoError` if there is none. `find` is an alias for it.
`transact_on_todo(path, position, action)` loads the store at `path`, calls
`action(todo, collection)`, and saves only if the action does not raise.

## Test helpers (`tdh.testutil`)

Setup helpers write a `test.json` store into a directory you give them:
`create_populated_store(directory, *texts)`,
`create_store_with_specs(directory, specs)`,
`create_store_with_nested_specs(directory, specs)` (specs are `TodoSpec`
objects) and `create_nested_store(directory)`. The `assert_*` helpers raise
`AssertionError` with a descriptive message. Examples are
`assert_todo_in_list`, `assert_todo_count` and `assert_todo_by_position`.

## What it does not do

`tdh` is a library only. It has no command-line program and no formatted or
coloured output of todo lists. Adding, listing, completing or searching todos
from a terminal means writing that front end on top of these modules.