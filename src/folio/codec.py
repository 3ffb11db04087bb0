"""YAML codec for record files.

Only ``.yaml`` files are recognised. Encoding is lenient: values the safe
representer cannot handle are dropped from their parent rather than aborting
the whole dump.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import PurePosixPath
from typing import Any

import yaml

from folio.errors import EncodeError, UnsupportedFormat

logger = logging.getLogger(__name__)

EXTENSION = ".yaml"

# Sentinel for values that cannot be represented
_DROP = object()


class _BlockDumper(yaml.SafeDumper):
    """Safe dumper that never emits anchors/aliases for repeated objects."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def check_format(path: str) -> None:
    """Raise UnsupportedFormat unless ``path`` has the YAML extension."""
    if PurePosixPath(path).suffix != EXTENSION:
        raise UnsupportedFormat(f"{path} is not a valid file type")


def decode(text: str, path: str) -> Any:
    check_format(path)
    return yaml.safe_load(text)


def encode(value: Any, path: str) -> str:
    """Serialize ``value`` as block-style YAML, keeping key insertion order."""
    check_format(path)
    pruned = _prune(value)
    if pruned is _DROP:
        raise EncodeError(f"Cannot encode {type(value).__name__} into {path}")
    return yaml.dump(
        pruned,
        Dumper=_BlockDumper,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    )


def _prune(value: Any) -> Any:
    if isinstance(value, Mapping):
        result = {}
        for key, item in value.items():
            pruned = _prune(item)
            if pruned is _DROP or type(key) not in _BlockDumper.yaml_representers:
                logger.debug("Dropping unserializable value at key %r", key)
                continue
            result[key] = pruned
        return result

    if isinstance(value, (list, tuple)):
        items = []
        for item in value:
            pruned = _prune(item)
            if pruned is _DROP:
                logger.debug("Dropping unserializable list item %r", item)
                continue
            items.append(pruned)
        return items

    if type(value) in _BlockDumper.yaml_representers:
        return value
    return _DROP
