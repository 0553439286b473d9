"""Dotted-path access into nested variable snapshots.

Snapshots are plain nested dicts. A path like "命定系统.命定之人" addresses
data["命定系统"]["命定之人"]. Keys passed separately to insert_at/delete_at
are used verbatim, so they may contain dots.
"""

from typing import Any


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def split_path(path: str) -> list[str]:
    parts = path.split(".")
    if not path or any(not p for p in parts):
        raise ValueError(f"Invalid variable path: {path!r}")
    return parts


def get_path(data: dict, path: str, default: Any = MISSING) -> Any:
    """Return the value at path, or default if any segment is absent."""
    node: Any = data
    for part in split_path(path):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def _container(data: dict, parts: list[str]) -> dict:
    """Walk to the dict at parts, creating missing levels."""
    node = data
    for part in parts:
        child = node.get(part)
        if not isinstance(child, dict):
            if child is not None:
                raise TypeError(f"Cannot descend into non-object at {part!r}")
            child = {}
            node[part] = child
        node = child
    return node


def set_path(data: dict, path: str, value: Any) -> None:
    parts = split_path(path)
    _container(data, parts[:-1])[parts[-1]] = value


def insert_at(data: dict, path: str, key: str, value: Any) -> None:
    """Set data[path][key] = value, creating the object at path if needed."""
    _container(data, split_path(path))[key] = value


def delete_at(data: dict, path: str, key: str) -> bool:
    """Remove key from the object at path. Returns False if it was absent."""
    node = get_path(data, path)
    if not isinstance(node, dict) or key not in node:
        return False
    del node[key]
    return True


def add_at(data: dict, path: str, delta: int | float) -> None:
    """Add delta to the number at path; an absent value counts as 0."""
    current = get_path(data, path, 0)
    if current is None:
        current = 0
    if isinstance(current, bool) or not isinstance(current, (int, float)):
        raise TypeError(f"Cannot add to non-numeric value at {path!r}")
    set_path(data, path, current + delta)
