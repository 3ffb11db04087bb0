"""Get/set/merge helpers for values nested inside a decoded document."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

PathLike = str | Sequence[str] | None


def split_path(path: PathLike) -> tuple[str, ...]:
    """Normalise a dotted string or key sequence into a tuple of keys."""
    if not path:
        return ()
    if isinstance(path, str):
        return tuple(part for part in path.split(".") if part)
    return tuple(path)


def get_in(value: Any, path: PathLike) -> Any:
    """Return the value at ``path``, or None when any step is missing."""
    for key in split_path(path):
        if not isinstance(value, Mapping) or key not in value:
            return None
        value = value[key]
    return value


def set_in(path: PathLike, value: Any) -> Any:
    """Wrap ``value`` in the minimal nested mapping that places it at ``path``."""
    for key in reversed(split_path(path)):
        value = {key: value}
    return value


def deep_merge(target: Any, source: Any) -> Any:
    """Merge ``source`` into a copy of ``target``.

    Mappings merge key by key and lists merge position by position (extra
    source items are appended). Anything else is replaced by ``source``.
    """
    if isinstance(target, Mapping) and isinstance(source, Mapping):
        merged = dict(target)
        for key, item in source.items():
            merged[key] = deep_merge(target[key], item) if key in target else item
        return merged

    if isinstance(target, list) and isinstance(source, list):
        merged = list(target)
        for index, item in enumerate(source):
            if index < len(merged):
                merged[index] = deep_merge(merged[index], item)
            else:
                merged.append(item)
        return merged

    return source
