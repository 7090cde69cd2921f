"""Dotted field-path access over JSON-like documents."""
from typing import Any, Iterator, List, Mapping, Sequence


class _Missing:
    """Marker for a path that does not resolve."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def get_value(document: Any, path: str) -> Any:
    """Resolve ``path`` to a single value, or MISSING.

    Numeric segments index into lists; arrays are not expanded.
    """
    current = document
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return MISSING
            current = current[part]
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


def collect_values(document: Any, path: str) -> List[Any]:
    """Resolve ``path`` to every value it reaches, expanding arrays of sub-documents.

    ``{"tags": [{"name": "a"}, {"name": "b"}]}`` with ``tags.name`` yields
    ``["a", "b"]``. An empty list means the field is missing.
    """
    return list(_collect(document, path.split(".")))


def _collect(current: Any, parts: Sequence[str]) -> Iterator[Any]:
    if not parts:
        yield current
        return

    head, rest = parts[0], parts[1:]
    if isinstance(current, Mapping):
        if head in current:
            yield from _collect(current[head], rest)
    elif isinstance(current, list):
        if head.isdigit() and int(head) < len(current):
            yield from _collect(current[int(head)], rest)
        for element in current:
            if isinstance(element, Mapping):
                yield from _collect(element, parts)


def set_value(document: dict, path: str, value: Any) -> None:
    """Assign ``value`` at ``path``, creating intermediate objects."""
    parts = path.split(".")
    current = document
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[parts[-1]] = value


def remove_value(document: dict, path: str) -> None:
    """Remove the value at ``path`` if present."""
    parts = path.split(".")
    current: Any = document
    for part in parts[:-1]:
        if not isinstance(current, dict) or part not in current:
            return
        current = current[part]
    if isinstance(current, dict):
        current.pop(parts[-1], None)
