"""JSON encoding of todo lists, reading current and older file layouts."""

from __future__ import annotations

import json
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from .models import ZERO_TIME, Todo, TodoStatus

_TIME_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _new_id() -> str:
    return str(uuid.uuid4())


def _kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "null"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON value {name}")


def _decode(data: Union[bytes, bytearray, str]) -> Any:
    text = data.decode("utf-8", errors="replace") if isinstance(data, (bytes, bytearray)) else data
    return json.loads(text, parse_constant=_reject_constant)


def _field(obj: Dict[str, Any], name: str) -> Any:
    if name in obj:
        return obj[name]
    lowered = name.lower()
    for key, value in obj.items():
        if key.lower() == lowered:
            return value
    return None


def _as_list(raw: Any) -> List[Any]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"cannot unmarshal {_kind(raw)} into a list of todos")
    return raw


def _as_object(raw: Any) -> Dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"cannot unmarshal {_kind(raw)} into a todo")
    return raw


def _string(value: Any, name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"cannot unmarshal {_kind(value)} into field {name} of type string")
    return value


def _integer(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"cannot unmarshal {_kind(value)} into field {name} of type int")
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"number {value} overflows field {name}")
    return value


def _status(value: Any) -> Union[TodoStatus, str]:
    text = _string(value, "status")
    try:
        return TodoStatus(text)
    except ValueError:
        return text


def parse_time(text: str) -> datetime:
    """Parse an RFC 3339 timestamp such as 2024-01-01T00:00:00Z."""
    match = _TIME_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"cannot parse {text!r} as RFC 3339 time")
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    fraction = match.group(7) or ""
    micro = int((fraction + "000000")[:6])
    zone = match.group(8)
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tz = timezone(sign * offset)
    return datetime(year, month, day, hour, minute, second, micro, tzinfo=tz)


def format_time(moment: datetime) -> str:
    """Format a datetime as RFC 3339 with trailing fractional zeros trimmed."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _time(value: Any) -> datetime:
    if value is None:
        return ZERO_TIME
    if not isinstance(value, str):
        raise ValueError(f"cannot unmarshal {_kind(value)} into field modified of type time")
    return parse_time(value)


def _parse_todo(raw: Any) -> Todo:
    obj = _as_object(raw)
    items_raw = _field(obj, "items")
    items: Optional[List[Todo]] = None
    if items_raw is not None:
        items = [_parse_todo(element) for element in _as_list(items_raw)]
    return Todo(
        id=_string(_field(obj, "id"), "id"),
        parent_id=_string(_field(obj, "parentId"), "parentId"),
        position=_integer(_field(obj, "position"), "position"),
        text=_string(_field(obj, "text"), "text"),
        status=_status(_field(obj, "status")),
        modified=_time(_field(obj, "modified")),
        items=items,  # type: ignore[arg-type]
    )


def _parse_mixed(raw: Any) -> List[Todo]:
    records = []
    for element in _as_list(raw):
        obj = _as_object(element)
        records.append(
            (
                _field(obj, "id"),
                _integer(_field(obj, "position"), "position"),
                _string(_field(obj, "text"), "text"),
                _status(_field(obj, "status")),
                _time(_field(obj, "modified")),
            )
        )

    todos = []
    for index, (raw_id, position, text, status, modified) in enumerate(records, start=1):
        if isinstance(raw_id, str):
            todo_id = raw_id
        else:
            todo_id = _new_id()
            if isinstance(raw_id, (int, float)) and not isinstance(raw_id, bool) and position == 0:
                position = int(raw_id)
        if position == 0:
            position = index
        todos.append(
            Todo(
                id=todo_id or _new_id(),
                position=position,
                text=text,
                status=status,
                modified=modified,
                items=None,  # type: ignore[arg-type]
            )
        )
    return todos


def _parse_legacy(raw: Any) -> List[Todo]:
    todos = []
    for element in _as_list(raw):
        obj = _as_object(element)
        todos.append(
            Todo(
                id=_new_id(),
                position=_integer(_field(obj, "id"), "id"),
                text=_string(_field(obj, "text"), "text"),
                status=_status(_field(obj, "status")),
                modified=_time(_field(obj, "modified")),
                items=None,  # type: ignore[arg-type]
            )
        )
    return todos


def load_todos_with_migration(data: Union[bytes, bytearray, str]) -> List[Todo]:
    """Decode a todo list, accepting the current layout and older flat ones.

    Todos decoded from an older layout have ``items`` set to None, which marks
    them as needing migration. Raises ValueError when nothing can be decoded.
    """
    if len(data) == 0:
        return []

    raw = _decode(data)

    try:
        todos: Optional[List[Todo]] = [_parse_todo(e) for e in _as_list(raw)]
    except ValueError:
        todos = None
    if todos and todos[0].items is not None:
        return todos

    try:
        return _parse_mixed(raw)
    except ValueError:
        pass

    return _parse_legacy(raw)


def todo_to_dict(todo: Todo) -> Dict[str, Any]:
    """Return the JSON-ready mapping for a todo and its children."""
    items = None if todo.items is None else [todo_to_dict(child) for child in todo.items]
    return {
        "id": todo.id,
        "parentId": todo.parent_id,
        "position": todo.position,
        "text": todo.text,
        "status": str(todo.status),
        "modified": format_time(todo.modified),
        "items": items,
    }


def dump_todos(todos: Optional[Sequence[Todo]]) -> str:
    """Encode todos as indented JSON; None encodes as null."""
    payload = None if todos is None else [todo_to_dict(todo) for todo in todos]
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    for char, escape in _HTML_ESCAPES.items():
        text = text.replace(char, escape)
    return text